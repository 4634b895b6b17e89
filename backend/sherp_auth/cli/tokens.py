"""Flask CLI commands for revocation-store maintenance."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from sherp_auth.api.deps import get_revocation_store

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh-token revocation maintenance."""


@tokens_cli.command("purge")
@with_appcontext
def purge_command() -> None:
    """Delete revocation entries older than the retention window."""
    store = get_revocation_store(current_app)
    removed = store.purge_expired()
    LOGGER.info("tokens.purge", extra={"event": "tokens.purge", "outcome": f"removed={removed}"})
    click.echo(f"Purged {removed} expired revocation entries.")
