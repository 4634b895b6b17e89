# sherp_auth/services/auth/service.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from sherp_auth.core.logger import log_auth_event
from sherp_auth.models.user import User
from sherp_auth.repositories.user import UserRepository
from sherp_auth.services._shared.base import BaseService, ServiceContext
from sherp_auth.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenRevokedError,
)
from sherp_auth.services._shared.ports.revocation_store import RevocationStore
from sherp_auth.services._shared.ports.token_provider import TokenProvider
from sherp_auth.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    RegisterOut,
    TokenPairOut,
    UserOut,
)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_dummy_hash: str | None = None


def _burn_password_check(raw: str) -> None:
    """Spend the same hashing cost as a real verification for unknown emails."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = generate_password_hash("sherp-auth-timing-equalizer")
    check_password_hash(_dummy_hash, raw)


class AuthService(BaseService):
    """
    Authentication session lifecycle (login / refresh / logout).

    Tokens are issued and decoded through a pluggable :class:`TokenProvider`;
    refresh tokens are invalidated through a :class:`RevocationStore` whose
    entries expire after a fixed retention window.

    State machine of a refresh token::

        Active --logout/rotation--> Revoked --retention elapsed--> Expired/Purged

    There is no way back from ``Revoked`` to ``Active``.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        revocation_store: RevocationStore,
        token_cfg: AuthTokenConfig | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for issuing/decoding JWTs.
        :param revocation_store: Denylist of refresh tokens.
        :param token_cfg: Access/Refresh expiry configuration.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.revocations = revocation_store
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email and wrong password are indistinguishable to the caller:
        same exception, same message, comparable hashing cost.

        :param dto: Validated login input.
        :returns: Access/Refresh token pair.
        :raises InvalidCredentialsError: If credentials do not match.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_email(dto.email)
            if user is None:
                _burn_password_check(dto.password)
                self._log("auth.login", outcome="failed", level=logging.WARNING)
                raise InvalidCredentialsError()
            if not user.verify_password(dto.password):
                self._log(
                    "auth.login", outcome="failed", level=logging.WARNING, user_id=user.id
                )
                raise InvalidCredentialsError()
            user_id = user.id

        pair = self._issue_pair(user_id, fresh=True)
        self._log("auth.login", outcome="succeeded", user_id=user_id)
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Steps
        -----
        1. Verify signature, expiry and ``type == "refresh"``.
        2. Reject tokens found in the revocation store.
        3. Resolve the subject; a deleted user invalidates the token.
        4. Revoke the presented token. If a concurrent request revoked it
           first, this request loses and no pair is issued.
        5. Issue a new pair.

        :raises InvalidTokenError: Malformed, forged, expired or wrong type.
        :raises TokenRevokedError: Token already logged out or rotated.
        """
        token = dto.refresh_token
        claims = self._decode_refresh(token)

        if self.revocations.is_revoked(token):
            self._log("auth.refresh", outcome="revoked", level=logging.WARNING)
            raise TokenRevokedError()

        user_id = self._coerce_user_id(claims.get("sub"))
        with self.ro_uow() as uow:
            if uow.users.get(user_id) is None:
                self._log(
                    "auth.refresh", outcome="unknown_subject", level=logging.WARNING, user_id=user_id
                )
                raise InvalidTokenError()

        if not self.revocations.revoke(token):
            self._log(
                "auth.refresh", outcome="revoked", level=logging.WARNING, user_id=user_id
            )
            raise TokenRevokedError()

        pair = self._issue_pair(user_id, fresh=False)
        self._log("auth.refresh", outcome="rotated", user_id=user_id)
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the presented refresh token. Idempotent.

        The signature and token type are still verified so arbitrary strings
        cannot be written into the store. An already-expired token can never
        be refreshed again, so it is acknowledged without a write.

        :raises InvalidTokenError: Forged, malformed or non-refresh token.
        """
        token = dto.refresh_token
        claims = self._decode_refresh(token, allow_expired=True)
        user_id = claims.get("uid")

        exp = claims.get("exp")
        if exp is not None and int(exp) <= int(self.now_utc().timestamp()):
            self._log("auth.logout", outcome="already_expired", user_id=user_id)
            return

        newly = self.revocations.revoke(token)
        self._log(
            "auth.logout", outcome="revoked" if newly else "already_revoked", user_id=user_id
        )

    # ------------------------------------------------------------------ #
    # Registration / identity
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegisterOut:
        """
        Create an account and sign it in.

        :raises ConflictError: If the email or username is already taken.
        """
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                if repo.exists_by_email(dto.email):
                    raise ConflictError("User", "email already registered")
                if repo.exists_by_username(dto.username):
                    raise ConflictError("User", "username already taken")
                user = repo.create(
                    email=dto.email,
                    password=dto.password,
                    username=dto.username,
                    full_name=dto.full_name,
                )
                out = self._to_user_out(user)
        except IntegrityError as exc:
            # lost a race against a concurrent registration
            raise ConflictError("User", "email or username already registered") from exc

        self._log("auth.register", outcome="succeeded", user_id=out.id)
        return RegisterOut(user=out, tokens=self._issue_pair(out.id, fresh=True))

    def whoami(self, identity: Any) -> UserOut:
        """Return the user referenced by an access token subject."""
        user_id = self._coerce_user_id(identity)
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise InvalidTokenError()
            return self._to_user_out(user)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user_id: int, *, fresh: bool) -> TokenPairOut:
        identity = str(user_id)
        claims: dict[str, Any] = {"uid": user_id}
        access = self.tokens.create_access_token(
            identity=identity,
            additional_claims=claims,
            expires_delta=self.cfg.access_expires,
            fresh=fresh,
        )
        refresh = self.tokens.create_refresh_token(
            identity=identity,
            additional_claims=claims,
            expires_delta=self.cfg.refresh_expires,
        )
        return TokenPairOut(access_token=access, refresh_token=refresh)

    def _decode_refresh(self, token: str, *, allow_expired: bool = False) -> dict[str, Any]:
        try:
            claims = self.tokens.decode(token, allow_expired=allow_expired)
        except InvalidTokenError:
            self._log("auth.token", outcome="invalid", level=logging.WARNING)
            raise
        if claims.get("type") != REFRESH_TOKEN_TYPE:
            self._log("auth.token", outcome="wrong_type", level=logging.WARNING)
            raise InvalidTokenError("Refresh token required")
        return claims

    def _log(self, event: str, *, outcome: str, level: int = logging.INFO, **fields: Any) -> None:
        """Emit an auth event tagged with this service's correlation id."""
        log_auth_event(
            event, outcome=outcome, level=level, request_id=self.ctx.request_id, **fields
        )

    @staticmethod
    def _coerce_user_id(subject: Any) -> int:
        """Ensure the JWT subject can be treated as an integer user id."""
        if isinstance(subject, int) and not isinstance(subject, bool):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise InvalidTokenError("Invalid token subject")

    @staticmethod
    def _to_user_out(user: User) -> UserOut:
        return UserOut(
            id=user.id,
            email=user.email,
            username=user.username,
            full_name=user.full_name,
        )
