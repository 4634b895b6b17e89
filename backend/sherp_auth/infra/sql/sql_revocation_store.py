# sherp_auth/infra/sql/sql_revocation_store.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sherp_auth.services._shared.ports.revocation_store import DEFAULT_RETENTION, RevocationStore
from sherp_auth.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


class SQLAlchemyRevocationStore(RevocationStore):
    """
    Revocation store backed by the ``revoked_tokens`` table.

    Relational databases have no native row TTL, so expiry is enforced twice:

    - lazily on read: rows older than ``retention`` never count as revoked;
    - physically by :meth:`purge_expired`, run from ``flask tokens purge``.

    :param retention: How long a revocation stays effective.
    :param clock: Source of "now" (UTC); injectable for tests.
    """

    def __init__(
        self,
        *,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.retention = retention
        self._clock = clock or (lambda: datetime.now(UTC))

    def _cutoff(self, now: datetime) -> datetime:
        return now - self.retention

    def revoke(self, refresh_token: str) -> bool:
        now = self._clock()
        with SQLAlchemyUnitOfWork() as uow:
            return uow.revoked_tokens.insert(
                refresh_token, created_at=now, expired_before=self._cutoff(now)
            )

    def is_revoked(self, refresh_token: str) -> bool:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.revoked_tokens.find_active(
                refresh_token, expired_before=self._cutoff(self._clock())
            )
            return row is not None

    def purge_expired(self) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.revoked_tokens.delete_expired(self._cutoff(self._clock()))
