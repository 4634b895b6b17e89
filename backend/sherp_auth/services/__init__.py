"""Service layer public API.

Re-exports
----------
- :class:`BaseService`, :class:`ServiceContext` (``services._shared.base``)
- :class:`AuthService` and its DTOs (``services.auth``)
- :class:`SeedService` (``services.seed``)
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from .auth.dto import AuthTokenConfig, LoginIn, LogoutIn, RefreshIn, RegisterIn, TokenPairOut
from .auth.service import AuthService
from .seed.service import SeedService

__all__ = [
    "AuthService",
    "AuthTokenConfig",
    "BaseService",
    "LoginIn",
    "LogoutIn",
    "RefreshIn",
    "RegisterIn",
    "SeedService",
    "ServiceContext",
    "TokenPairOut",
]
