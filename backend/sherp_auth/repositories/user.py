"""User repository for persistence and credential lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from sherp_auth.models.user import User
from sherp_auth.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    """Return the canonical (trimmed, lowercase) form used for storage and lookup."""
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER handles JWT or session creation, only DB-level user access.
    """

    model = User

    def _filterable_fields(self):
        """Whitelist fields safe for equality lookups."""
        return {
            "id": User.id,
            "email": User.email,
            "username": User.username,
        }

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == normalize_email(email))
        return bool(self.session.execute(stmt).first())

    def exists_by_username(self, username: str) -> bool:
        """Return ``True`` when ``username`` is already taken."""
        stmt = select(User.id).where(User.username == username.strip())
        return bool(self.session.execute(stmt).first())

    def create(
        self,
        *,
        email: str,
        password: str,
        username: str,
        full_name: str | None = None,
    ) -> User:
        """Persist a new user; the model setter hashes ``password``.

        :returns: The flushed user with its primary key populated.
        """
        user = User(email=email, username=username, full_name=full_name)
        user.password = password
        return self.add(user)
