"""
sherp_auth.services._shared.ports
=================================

*Ports* (hexagonal interfaces) for the authentication session lifecycle.

They decouple the service layer from concrete token and storage mechanisms.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for JWT creation and decoding.

- :mod:`revocation_store`:
    Defines :class:`~.RevocationStore`, a denylist of refresh tokens with a
    retention window, plus the in-memory implementation.

Concrete adapters (SQLAlchemy, Redis, Flask-JWT-Extended) live under
``sherp_auth.infra``.
"""

from __future__ import annotations

from .revocation_store import DEFAULT_RETENTION, InMemoryRevocationStore, RevocationStore
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "DEFAULT_RETENTION",
    "InMemoryRevocationStore",
    "RevocationStore",
    "StubTokenProvider",
    "TokenProvider",
]
