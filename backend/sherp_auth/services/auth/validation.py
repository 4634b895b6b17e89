"""Input validation for the session-lifecycle operations.

Each ``validate_*`` helper loads a raw mapping (usually a JSON body) through
the matching Marshmallow schema and returns a typed DTO. Failures surface as
the service-level :class:`ValidationError` carrying every failing field, so
callers outside HTTP (CLI, tests) get the same contract.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from marshmallow import Schema
from marshmallow import ValidationError as MarshmallowValidationError

from sherp_auth.schemas.auth import LoginSchema, RefreshTokenSchema, RegisterSchema
from sherp_auth.services._shared.errors import ValidationError
from sherp_auth.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn

_login_schema = LoginSchema()
_register_schema = RegisterSchema()
_refresh_schema = RefreshTokenSchema()


def _flatten(messages: Any) -> dict[str, list[str]]:
    if not isinstance(messages, Mapping):
        return {"_schema": [str(messages)]}
    errors: dict[str, list[str]] = {}
    for name, value in messages.items():
        if isinstance(value, list):
            errors[str(name)] = [str(item) for item in value]
        elif isinstance(value, Mapping):
            errors[str(name)] = [msg for msgs in _flatten(value).values() for msg in msgs]
        else:
            errors[str(name)] = [str(value)]
    return errors


def _load(schema: Schema, payload: Any) -> dict[str, Any]:
    try:
        return schema.load(payload if payload is not None else {})
    except MarshmallowValidationError as exc:
        raise ValidationError(_flatten(exc.normalized_messages())) from exc


def validate_login(payload: Any) -> LoginIn:
    """Validate login input (syntactic email, password of 8 to 128 characters).

    :raises ValidationError: Listing every failing field.
    """
    data = _load(_login_schema, payload)
    return LoginIn(email=data["email"], password=data["password"])


def validate_refresh(payload: Any) -> RefreshIn:
    data = _load(_refresh_schema, payload)
    return RefreshIn(refresh_token=data["refresh_token"])


def validate_logout(payload: Any) -> LogoutIn:
    data = _load(_refresh_schema, payload)
    return LogoutIn(refresh_token=data["refresh_token"])


def validate_register(payload: Any) -> RegisterIn:
    data = _load(_register_schema, payload)
    return RegisterIn(
        email=data["email"],
        username=data["username"],
        password=data["password"],
        full_name=data.get("full_name"),
    )


__all__ = ["validate_login", "validate_logout", "validate_refresh", "validate_register"]
