"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

import pytest
from authsvc.core.logger import JSONFormatter, configure_logging


@pytest.fixture()
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("_restore_root_logger")
def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    configure_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG
    assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)


def test_json_formatter_copies_whitelisted_extras() -> None:
    record = logging.LogRecord(
        "authsvc.test", logging.WARNING, __file__, 1, "Token rejected: %s", ("expired",), None
    )
    record.token_id = "abc"
    record.reason = "TokenExpiredError"
    record.password = "never-logged"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Token rejected: expired"
    assert payload["level"] == "WARNING"
    assert payload["token_id"] == "abc"
    assert payload["reason"] == "TokenExpiredError"
    assert "password" not in payload
