"""Flask CLI commands for seeding development users."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from sherp_auth.schemas.auth import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH
from sherp_auth.services._shared.errors import ServiceError
from sherp_auth.services.seed.service import SeedService, SeedSummary

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Raise logging verbosity for seed modules when requested."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger("sherp_auth.services.seed").setLevel(level)
    LOGGER.setLevel(level)


def _echo_summary(summary: SeedSummary) -> None:
    click.echo("Seed summary:")
    click.echo(
        f"  users  fetched={summary.fetched:>2}  created={summary.created:>2}"
        f"  existing={summary.existing:>2}  skipped={summary.skipped:>2}"
    )


def _ensure_non_production() -> None:
    """Abort seeding when running in production."""
    if str(current_app.config.get("APP_ENV", "")).lower() == "production":
        raise click.UsageError("The 'flask seed' commands are restricted to non-production environments.")


@click.group("seed")
@click.option("--verbose", is_flag=True, help="Enable verbose logging for seeding.")
def seed_cli(verbose: bool) -> None:
    """Collection of database seeding commands."""
    _configure_logging(verbose)


@seed_cli.command("users")
@click.option("--count", default=20, show_default=True, type=click.IntRange(min=1, max=5000))
@click.option(
    "--password",
    default="ChangeMe123!",
    show_default=True,
    help="Password assigned to every seeded account.",
)
@with_appcontext
def users_command(count: int, password: str) -> None:
    """Fetch mock users from randomuser.me and insert the new ones."""
    _ensure_non_production()
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise click.BadParameter(
            f"must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters",
            param_hint="--password",
        )
    service = SeedService(
        source_url=current_app.config.get("SEED_USERS_URL", "https://randomuser.me/api/"),
        timeout=float(current_app.config.get("SEED_HTTP_TIMEOUT", 10)),
    )
    try:
        summary = service.seed_users(count, password=password)
    except ServiceError as exc:
        raise click.ClickException(f"Seeding failed: {exc}") from exc
    _echo_summary(summary)
