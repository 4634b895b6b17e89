"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are the stable contract between repositories, token adapters
and application services.

The translation to HTTP responses (RFC 7807) is handled by
``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` through ``BaseService``.
    """


# --------------------------------------------------------------------------- #
# Authentication lifecycle
# --------------------------------------------------------------------------- #


class AuthError(ServiceError):
    """Common parent of the session-lifecycle failures."""

    code = "unauthorized"


class InvalidCredentialsError(AuthError):
    """
    Raised when email/password do not match a stored user.

    Unknown email and wrong password share this exact error and message so
    callers cannot enumerate accounts.
    """

    code = "invalid_credentials"

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class InvalidTokenError(AuthError):
    """Raised for tokens that were never issued here, are malformed, expired
    or of the wrong type, or whose subject no longer exists."""

    code = "invalid_token"

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class TokenRevokedError(AuthError):
    """Raised when a refresh token found in the revocation store is presented."""

    code = "token_revoked"

    def __init__(self, message: str = "Token has been revoked") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Input and persistence
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ValidationError(ServiceError):
    """
    Raised when an input payload is malformed.

    :param errors: Failing field name → list of messages.
    :type errors: dict[str, list[str]]
    """

    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def fields(self) -> list[str]:
        """Sorted names of the failing fields."""
        return sorted(self.errors)

    def __str__(self) -> str:
        return f"Validation failed for: {', '.join(self.fields)}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class UpstreamError(ServiceError):
    """Raised when an external HTTP dependency (seed source) fails."""
