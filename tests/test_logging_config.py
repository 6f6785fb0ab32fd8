"""
Tests for logging setup.
"""
import json
import logging

from logging_config import QUIET_LOGGERS, JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord("store", logging.INFO, __file__, 1, "Dataset replaced: %s", (3,), None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_merges_extra_fields():
    line = JSONFormatter().format(_record(extra_fields={"loaded": 3, "previous": 0}))

    data = json.loads(line)
    assert data["message"] == "Dataset replaced: 3"
    assert data["logger"] == "store"
    assert data["level"] == "INFO"
    assert data["loaded"] == 3
    assert data["previous"] == 0
    assert "exception" not in data


def test_json_formatter_without_extra_fields():
    data = json.loads(JSONFormatter().format(_record()))
    assert set(data) == {"timestamp", "level", "logger", "message"}


def test_setup_logging_quiets_duplicate_and_client_loggers():
    setup_logging()

    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
