from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from sherp_auth.services._shared.errors import InvalidTokenError


class TokenProvider(Protocol):
    """
    Port for issuing and decoding JWT tokens.

    ``decode`` MUST raise :class:`InvalidTokenError` for anything it did not
    issue (bad signature, malformed input) and for expired tokens unless
    ``allow_expired`` is set.
    """

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
        fresh: bool = False,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode(self, token: str, *, allow_expired: bool = False) -> dict[str, Any]: ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests.

    Tokens are opaque ``"<type>.<sub>.<seq>"`` strings remembered in memory, so
    anything not issued by this instance is rejected like a forged JWT.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def _mk(
        self,
        *,
        identity: str,
        ttype: str,
        exp_delta: timedelta,
        additional_claims: dict[str, Any] | None = None,
        fresh: bool | None = None,
    ) -> str:
        self._seq += 1
        token = f"{ttype}.{identity}.{self._seq}"
        payload: dict[str, Any] = {
            "sub": identity,
            "type": ttype,
            "jti": f"jti-{self._seq}",
            "exp": int((datetime.now(UTC) + exp_delta).timestamp()),
        }
        if additional_claims:
            payload.update(additional_claims)
        if fresh is not None:
            payload["fresh"] = bool(fresh)
        self._issued[token] = payload
        return token

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
        fresh: bool = False,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="access",
            exp_delta=expires_delta or timedelta(minutes=15),
            additional_claims=additional_claims,
            fresh=fresh,
        )

    def create_refresh_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._mk(
            identity=identity,
            ttype="refresh",
            exp_delta=expires_delta or timedelta(days=7),
            additional_claims=additional_claims,
        )

    def decode(self, token: str, *, allow_expired: bool = False) -> dict[str, Any]:
        payload = self._issued.get(token)
        if payload is None:
            raise InvalidTokenError()
        if not allow_expired and payload["exp"] <= int(datetime.now(UTC).timestamp()):
            raise InvalidTokenError("Token has expired")
        return dict(payload)
