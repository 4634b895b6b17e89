"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from sherp_auth.repositories.base import BaseRepository
from sherp_auth.repositories.revoked_token import RevokedTokenRepository
from sherp_auth.repositories.user import UserRepository, normalize_email

__all__ = [
    "BaseRepository",
    "RevokedTokenRepository",
    "UserRepository",
    "normalize_email",
]
