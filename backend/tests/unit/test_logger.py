"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from sherp_auth.core.logger import JSONFormatter, configure_logging, log_auth_event


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        configure_logging("DEBUG")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_json_formatter_promotes_event_fields() -> None:
    record = logging.LogRecord("sherp_auth.auth", logging.INFO, __file__, 1, "auth.login.ok", None, None)
    record.event = "auth.login"
    record.outcome = "succeeded"
    record.user_id = 7

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "auth.login.ok"
    assert (payload["event"], payload["outcome"], payload["user_id"]) == ("auth.login", "succeeded", 7)


def test_log_auth_event_carries_structured_fields(caplog) -> None:
    caplog.set_level(logging.INFO, logger="sherp_auth.auth")

    log_auth_event("auth.logout", outcome="revoked", user_id=3)

    record = caplog.records[-1]
    assert record.name == "sherp_auth.auth"
    assert record.getMessage() == "auth.logout.revoked"
    assert (record.event, record.outcome, record.user_id) == ("auth.logout", "revoked", 3)
