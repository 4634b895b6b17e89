"""Shared API helpers for service wiring and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from sherp_auth.core.config import as_timedelta
from sherp_auth.core.extensions import get_redis
from sherp_auth.core.logger import ensure_request_id
from sherp_auth.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from sherp_auth.infra.redis.redis_revocation_store import RedisRevocationStore
from sherp_auth.infra.sql.sql_revocation_store import SQLAlchemyRevocationStore
from sherp_auth.services._shared.base import BaseService, ServiceContext
from sherp_auth.services._shared.errors import ServiceError
from sherp_auth.services._shared.ports import RevocationStore
from sherp_auth.services.auth.dto import AuthTokenConfig, TokenPairOut
from sherp_auth.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"

_STORE_KEY = "sherp_auth.revocation_store"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def service_errors(func: F) -> F:
    """Translate :class:`ServiceError` raised by a view into its ``APIError``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            raise BaseService.translate_exceptions(exc) from exc

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Service wiring
# --------------------------------------------------------------------------- #


def _as_timedelta(value: Any, default: timedelta) -> timedelta:
    parsed = as_timedelta(value)
    return default if parsed is None else parsed


def token_config(app: Flask | None = None) -> AuthTokenConfig:
    """Build :class:`AuthTokenConfig` from the application config."""
    config = (app or current_app).config
    defaults = AuthTokenConfig()
    return AuthTokenConfig(
        access_expires=_as_timedelta(
            config.get("JWT_ACCESS_TOKEN_EXPIRES"), defaults.access_expires
        ),
        refresh_expires=_as_timedelta(
            config.get("JWT_REFRESH_TOKEN_EXPIRES"), defaults.refresh_expires
        ),
        retention=_as_timedelta(config.get("REVOCATION_RETENTION"), defaults.retention),
    )


def build_revocation_store(app: Flask) -> RevocationStore:
    """Pick the revocation backend: Redis when configured, SQL otherwise."""
    retention = token_config(app).retention
    client = get_redis()
    if client is not None:
        return RedisRevocationStore(client, retention=retention)
    return SQLAlchemyRevocationStore(retention=retention)


def get_revocation_store(app: Flask | None = None) -> RevocationStore:
    """Return the app-wide revocation store, creating it on first use."""
    app = app or cast(Flask, current_app._get_current_object())  # type: ignore[attr-defined]
    store = app.extensions.get(_STORE_KEY)
    if store is None:
        store = build_revocation_store(app)
        app.extensions[_STORE_KEY] = store
    return cast(RevocationStore, store)


def build_auth_service() -> AuthService:
    """Assemble :class:`AuthService` for the current request."""
    return AuthService(
        token_provider=JWTTokenProvider(),
        revocation_store=get_revocation_store(),
        token_cfg=token_config(),
        ctx=ServiceContext(request_id=ensure_request_id()),
    )


# --------------------------------------------------------------------------- #
# Cookies
# --------------------------------------------------------------------------- #


def refresh_token_from_request() -> dict[str, Any]:
    """Return the refresh-token payload from the JSON body, else from the cookie."""
    body = request.get_json(silent=True)
    payload: dict[str, Any] = dict(body) if isinstance(body, dict) else {}
    if not payload.get("refresh_token"):
        cookie = request.cookies.get(REFRESH_COOKIE)
        if cookie:
            payload["refresh_token"] = cookie
    return payload


def set_auth_cookies(response: Response, pair: TokenPairOut) -> Response:
    """Attach ``HttpOnly`` ``SameSite=Strict`` token cookies to ``response``."""
    cfg = token_config()
    secure = bool(current_app.config.get("AUTH_COOKIES_SECURE", True))
    for name, value, max_age in (
        (ACCESS_COOKIE, pair.access_token, cfg.access_expires),
        (REFRESH_COOKIE, pair.refresh_token, cfg.refresh_expires),
    ):
        response.set_cookie(
            name,
            value,
            max_age=int(max_age.total_seconds()),
            httponly=True,
            secure=secure,
            samesite="Strict",
        )
    return response


def clear_auth_cookies(response: Response) -> Response:
    secure = bool(current_app.config.get("AUTH_COOKIES_SECURE", True))
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(name, httponly=True, secure=secure, samesite="Strict")
    return response
