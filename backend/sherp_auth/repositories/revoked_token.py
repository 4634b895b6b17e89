"""Repository for the ``revoked_tokens`` denylist table."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from sherp_auth.models.revoked_token import RevokedToken
from sherp_auth.repositories.base import BaseRepository

_UPSERT_DIALECTS = {"sqlite": sqlite_insert, "postgresql": pg_insert}


class RevokedTokenRepository(BaseRepository[RevokedToken]):
    """Persistence-only access to revoked refresh tokens.

    Expiry is expressed through cutoffs supplied by the caller: a row whose
    ``created_at`` is at or before the cutoff is expired and behaves as if it
    did not exist.
    """

    model = RevokedToken

    def _filterable_fields(self):
        return {
            "id": RevokedToken.id,
            "refresh_token": RevokedToken.refresh_token,
        }

    def insert(self, refresh_token: str, *, created_at: datetime, expired_before: datetime) -> bool:
        """Record ``refresh_token`` as revoked without ever raising on duplicates.

        An expired row for the same token is re-stamped with ``created_at``;
        an active row is left untouched.

        :param refresh_token: Encoded refresh token.
        :param created_at: Revocation instant (UTC).
        :param expired_before: Retention cutoff; rows at or before it are expired.
        :returns: ``True`` when this call moved the token into the active
            denylist, ``False`` when it was already actively revoked.
        :raises NotImplementedError: On a dialect without ``ON CONFLICT`` support.
        """
        dialect = self.dialect_name
        insert_fn = _UPSERT_DIALECTS.get(dialect)
        if insert_fn is None:
            raise NotImplementedError(f"Revocation upsert is not supported on {dialect!r}")

        stmt = insert_fn(RevokedToken).values(refresh_token=refresh_token, created_at=created_at)
        stmt = stmt.on_conflict_do_update(
            index_elements=["refresh_token"],
            set_={"created_at": stmt.excluded.created_at},
            where=RevokedToken.created_at <= expired_before,
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    def find_active(self, refresh_token: str, *, expired_before: datetime) -> RevokedToken | None:
        """Return the denylist row for ``refresh_token`` unless it has expired."""
        stmt = select(RevokedToken).where(
            RevokedToken.refresh_token == refresh_token,
            RevokedToken.created_at > expired_before,
        )
        return cast(RevokedToken | None, self.session.execute(stmt).scalars().first())

    def delete_expired(self, expired_before: datetime) -> int:
        """Physically delete rows at or before ``expired_before``.

        :returns: Number of rows removed.
        """
        stmt = delete(RevokedToken).where(RevokedToken.created_at <= expired_before)
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)
