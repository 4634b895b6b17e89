"""Unit tests for environment-driven settings and their load-time checks."""

from __future__ import annotations

import importlib.util
from datetime import timedelta

import pytest

from sherp_auth.core import config as config_module
from sherp_auth.core.config import validate_config
from sherp_auth.factory import create_app


def _load_fresh_config_module():
    """Execute ``core/config.py`` again so class attributes re-read the env."""
    spec = importlib.util.spec_from_file_location("_fresh_config", config_module.__file__)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_token_lifetimes_read_from_matching_env_vars(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_TOKEN_EXPIRES", "5")
    monkeypatch.setenv("JWT_REFRESH_TOKEN_EXPIRES", "2")
    monkeypatch.setenv("REVOCATION_RETENTION", "3")

    base = _load_fresh_config_module().BaseConfig

    assert base.JWT_ACCESS_TOKEN_EXPIRES == timedelta(minutes=5)
    assert base.JWT_REFRESH_TOKEN_EXPIRES == timedelta(days=2)
    assert base.REVOCATION_RETENTION == timedelta(days=3)


def test_validate_config_accepts_defaults():
    validate_config(
        {
            "JWT_REFRESH_TOKEN_EXPIRES": config_module.TestingConfig.JWT_REFRESH_TOKEN_EXPIRES,
            "REVOCATION_RETENTION": config_module.TestingConfig.REVOCATION_RETENTION,
        }
    )


def test_validate_config_accepts_retention_given_in_seconds():
    validate_config({"JWT_REFRESH_TOKEN_EXPIRES": timedelta(hours=1), "REVOCATION_RETENTION": 3600})


@pytest.mark.parametrize(
    "refresh, retention",
    [
        (timedelta(days=7), timedelta(days=1)),
        (timedelta(days=7), None),
        (False, timedelta(days=7)),
    ],
)
def test_validate_config_rejects_retention_shorter_than_refresh_lifetime(refresh, retention):
    with pytest.raises(ValueError):
        validate_config({"JWT_REFRESH_TOKEN_EXPIRES": refresh, "REVOCATION_RETENTION": retention})


def test_create_app_refuses_short_retention():
    class ShortRetentionConfig(config_module.TestingConfig):
        REVOCATION_RETENTION = timedelta(days=1)

    with pytest.raises(ValueError, match="REVOCATION_RETENTION"):
        create_app(ShortRetentionConfig, instance_relative_config=False)
