"""Denylist entry for refresh tokens invalidated by logout or rotation."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sherp_auth.core.extensions import db

from .base import PKMixin, ReprMixin, utcnow


class RevokedToken(PKMixin, ReprMixin, db.Model):
    """
    A refresh token that must never be honored again.

    There is deliberately no foreign key to ``users``: the table is a pure
    denylist keyed by the encoded token value.

    Fields
    ------
    refresh_token : str
        The encoded refresh JWT, unique.
    created_at : datetime
        Revocation instant (UTC). Entries older than the configured retention
        window are treated as absent and removed by the purge command.
    """

    __tablename__ = "revoked_tokens"

    refresh_token: Mapped[str] = mapped_column(String(2048), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    __table_args__ = (UniqueConstraint("refresh_token", name="uq_revoked_tokens_refresh_token"),)
