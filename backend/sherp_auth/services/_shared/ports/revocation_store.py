from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol

#: Default retention window for revoked refresh tokens.
DEFAULT_RETENTION = timedelta(days=7)


class RevocationStore(Protocol):
    """
    Denylist of **refresh tokens** with a fixed retention window.

    A token stays revoked for ``retention`` after it was added; past that it
    is treated as absent and may be physically deleted. Every method is safe
    to call concurrently and repeatedly.
    """

    retention: timedelta

    def revoke(self, refresh_token: str) -> bool:
        """
        Add ``refresh_token`` to the denylist. Idempotent.

        :returns: ``True`` when this call revoked the token, ``False`` when it
            was already revoked (and still within the window).
        """

    def is_revoked(self, refresh_token: str) -> bool:
        """Return ``True`` while ``refresh_token`` is in the non-expired denylist."""

    def purge_expired(self) -> int:
        """Physically remove expired entries. :returns: Number removed."""


class InMemoryRevocationStore(RevocationStore):
    """
    Process-local revocation store with lazy expiry.

    .. note::
       Uses a threading lock so ``revoke`` is atomic across threads; intended
       for unit tests and single-process development servers.
    """

    def __init__(
        self,
        *,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.retention = retention
        self._clock = clock or (lambda: datetime.now(UTC))
        self._revoked: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def _active(self, created_at: datetime | None, now: datetime) -> bool:
        return created_at is not None and now - created_at < self.retention

    def revoke(self, refresh_token: str) -> bool:
        with self._lock:
            now = self._clock()
            if self._active(self._revoked.get(refresh_token), now):
                return False
            self._revoked[refresh_token] = now
            return True

    def is_revoked(self, refresh_token: str) -> bool:
        with self._lock:
            now = self._clock()
            created_at = self._revoked.get(refresh_token)
            if created_at is not None and not self._active(created_at, now):
                # lazy expiry
                del self._revoked[refresh_token]
            return self._active(created_at, now)

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [t for t, at in self._revoked.items() if not self._active(at, now)]
            for token in expired:
                del self._revoked[token]
            return len(expired)
