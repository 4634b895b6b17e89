from datetime import timedelta
from hashlib import sha256

import redis  # type: ignore[import-untyped]

from sherp_auth.services._shared.ports.revocation_store import DEFAULT_RETENTION, RevocationStore


class RedisRevocationStore(RevocationStore):
    """
    Denylist for **refresh tokens** using native Redis key expiry.

    Each revoked token becomes ``deny:rt:<sha256>`` with a TTL equal to the
    retention window, so Redis purges entries by itself.
    """

    def __init__(self, r: redis.Redis, *, retention: timedelta = DEFAULT_RETENTION):
        self.r = r
        self.retention = retention

    @staticmethod
    def _k(refresh_token: str) -> str:
        # Hash to keep keys short and avoid storing bearer credentials verbatim
        return f"deny:rt:{sha256(refresh_token.encode()).hexdigest()}"

    def revoke(self, refresh_token: str) -> bool:
        ttl = max(1, int(self.retention.total_seconds()))
        # NX keeps the first revocation instant; a second call is a no-op
        created = self.r.set(self._k(refresh_token), "1", ex=ttl, nx=True)
        return bool(created)

    def is_revoked(self, refresh_token: str) -> bool:
        return int(self.r.exists(self._k(refresh_token))) == 1

    def purge_expired(self) -> int:
        # Redis expires keys natively
        return 0
