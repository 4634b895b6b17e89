"""Tests for the ``flask tokens`` and ``flask seed`` command groups."""

from __future__ import annotations

from datetime import timedelta

import responses
from freezegun import freeze_time

from sherp_auth.infra.sql.sql_revocation_store import SQLAlchemyRevocationStore
from sherp_auth.models.revoked_token import RevokedToken
from sherp_auth.models.user import User


def test_tokens_purge_removes_expired_entries(app, session):
    runner = app.test_cli_runner()
    store = SQLAlchemyRevocationStore()

    with freeze_time("2025-05-01 08:00:00") as frozen:
        store.revoke("old")
        frozen.tick(timedelta(days=8))
        store.revoke("fresh")

        result = runner.invoke(args=["tokens", "purge"])

    assert result.exit_code == 0, result.output
    assert "Purged 1 expired revocation entries." in result.output
    assert [r.refresh_token for r in session.query(RevokedToken).all()] == ["fresh"]


@responses.activate
def test_seed_users_command(app, session):
    responses.add(
        responses.GET,
        app.config["SEED_USERS_URL"],
        json={
            "results": [
                {
                    "name": {"first": "Grace", "last": "Hopper"},
                    "email": "grace.hopper@example.com",
                    "login": {"username": "grace"},
                }
            ]
        },
        status=200,
    )
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed", "users", "--count", "1"])

    assert result.exit_code == 0, result.output
    assert "created= 1" in result.output
    assert session.query(User).filter_by(username="grace").count() == 1


@responses.activate
def test_seed_users_command_reports_upstream_failure(app, session):
    responses.add(responses.GET, app.config["SEED_USERS_URL"], status=500)

    result = app.test_cli_runner().invoke(args=["seed", "users", "--count", "3"])

    assert result.exit_code == 1
    assert "Seeding failed" in result.output


def test_seed_users_rejects_short_password(app, session):
    result = app.test_cli_runner().invoke(args=["seed", "users", "--password", "short"])
    assert result.exit_code == 2


@responses.activate
def test_seed_users_rejects_password_login_would_refuse(app, session):
    result = app.test_cli_runner().invoke(args=["seed", "users", "--password", "x" * 129])

    assert result.exit_code == 2
    assert "between 8 and 128" in result.output
    assert len(responses.calls) == 0
    assert session.query(User).count() == 0
