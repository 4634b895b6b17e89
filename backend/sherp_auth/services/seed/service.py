"""Development seeding of mock users fetched from randomuser.me."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import requests

from sherp_auth.services._shared.base import BaseService
from sherp_auth.services._shared.errors import UpstreamError, ValidationError

LOGGER = logging.getLogger(__name__)

DEFAULT_SOURCE_URL = "https://randomuser.me/api/"


@dataclass(frozen=True, slots=True)
class SeedUserIn:
    email: str
    username: str
    full_name: str | None


@dataclass(slots=True)
class SeedSummary:
    """Counters reported by :meth:`SeedService.seed_users`."""

    fetched: int = 0
    created: int = 0
    existing: int = 0
    skipped: int = 0


class SeedService(BaseService):
    """
    Fetch mock identities from an external generator and insert them.

    Insertion is idempotent by email (and username): re-running the seed
    never duplicates accounts.

    :param source_url: Base URL of the randomuser-compatible API.
    :param timeout: Per-request timeout in seconds.
    :param session: Optional ``requests.Session`` (connection reuse, tests).
    """

    def __init__(
        self,
        *,
        source_url: str = DEFAULT_SOURCE_URL,
        timeout: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__()
        self.source_url = source_url
        self.timeout = timeout
        self.http = session or requests.Session()

    def fetch(self, count: int) -> list[SeedUserIn]:
        """
        Download ``count`` mock users.

        :raises UpstreamError: On network failure, non-2xx status or a body
            that is not the expected JSON shape.
        """
        if count < 1:
            raise ValidationError({"count": ["Must be greater than or equal to 1."]})
        try:
            resp = self.http.get(self.source_url, params={"results": count}, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise UpstreamError(f"Seed source request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamError("Seed source returned invalid JSON") from exc

        results = body.get("results") if isinstance(body, Mapping) else None
        if not isinstance(results, list):
            raise UpstreamError("Seed source returned an unexpected payload")

        users: list[SeedUserIn] = []
        for raw in results:
            parsed = self._parse(raw)
            if parsed is None:
                LOGGER.debug("seed.users.unparseable")
                continue
            users.append(parsed)
        return users

    def seed_users(self, count: int, *, password: str) -> SeedSummary:
        """Fetch ``count`` users and persist the ones not already present."""
        fetched = self.fetch(count)
        summary = SeedSummary(fetched=len(fetched), skipped=count - len(fetched))

        with self.rw_uow() as uow:
            for item in fetched:
                if uow.users.exists_by_email(item.email) or uow.users.exists_by_username(
                    item.username
                ):
                    summary.existing += 1
                    continue
                uow.users.create(
                    email=item.email,
                    password=password,
                    username=item.username,
                    full_name=item.full_name,
                )
                summary.created += 1

        LOGGER.info(
            "seed.users.done",
            extra={"event": "seed.users", "outcome": f"created={summary.created}"},
        )
        return summary

    @staticmethod
    def _parse(raw: Any) -> SeedUserIn | None:
        if not isinstance(raw, Mapping):
            return None
        email = raw.get("email")
        login = raw.get("login") or {}
        username = login.get("username") if isinstance(login, Mapping) else None
        if not email or not username:
            return None
        name = raw.get("name") or {}
        parts = [name.get("first"), name.get("last")] if isinstance(name, Mapping) else []
        full_name = " ".join(p for p in parts if p) or None
        return SeedUserIn(email=str(email), username=str(username)[:50], full_name=full_name)
