"""Authentication endpoints using the service layer."""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, current_app, request
from flask_jwt_extended import get_jwt_identity

from sherp_auth.api.deps import (
    build_auth_service,
    clear_auth_cookies,
    json_response,
    refresh_token_from_request,
    require_auth,
    service_errors,
    set_auth_cookies,
    timing,
)
from sherp_auth.core.extensions import limiter
from sherp_auth.schemas import TokenPairSchema, UserSchema
from sherp_auth.services.auth.validation import (
    validate_login,
    validate_logout,
    validate_refresh,
    validate_register,
)

bp = Blueprint("auth", __name__)

token_schema = TokenPairSchema()
user_schema = UserSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
@service_errors
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    dto = validate_login(request.get_json(silent=True))
    pair = build_auth_service().login(dto)
    response = json_response({"data": token_schema.dump(asdict(pair))})
    return set_auth_cookies(response, pair)


@bp.post("/refresh")
@timing
@service_errors
def refresh():
    """Rotate the presented refresh token and issue a new pair."""

    dto = validate_refresh(refresh_token_from_request())
    pair = build_auth_service().refresh(dto)
    response = json_response({"data": token_schema.dump(asdict(pair))})
    return set_auth_cookies(response, pair)


@bp.post("/logout")
@timing
@service_errors
def logout():
    """Revoke the presented refresh token and clear the auth cookies."""

    dto = validate_logout(refresh_token_from_request())
    build_auth_service().logout(dto)
    response = json_response({"data": {"message": "Logged out"}})
    return clear_auth_cookies(response)


@bp.post("/register")
@timing
@service_errors
def register():
    """Create an account and return it together with a token pair."""

    dto = validate_register(request.get_json(silent=True))
    result = build_auth_service().register(dto)
    body = {
        "data": {
            "user": user_schema.dump(asdict(result.user)),
            **token_schema.dump(asdict(result.tokens)),
        }
    }
    response = json_response(body, status=201)
    return set_auth_cookies(response, result.tokens)


@bp.get("/whoami")
@require_auth
@timing
@service_errors
def whoami():
    """Return the authenticated user profile."""

    user = build_auth_service().whoami(get_jwt_identity())
    return json_response({"data": user_schema.dump(asdict(user))})
