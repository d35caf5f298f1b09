"""Structured Logging — tests for the JSON line shape and handler replacement."""

import json
import logging

from stockhub.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "stockhub.services", logging.INFO, __file__, 1, "Stock created", None, None,
    )
    record.__dict__.update(extra)
    return record


def test_json_line_has_core_fields():
    line = json.loads(JSONFormatter().format(_record()))
    assert line["level"] == "INFO"
    assert line["logger"] == "stockhub.services"
    assert line["message"] == "Stock created"
    assert line["timestamp"].endswith("+00:00")


def test_domain_extras_copied_when_present():
    line = json.loads(JSONFormatter().format(
        _record(stock_id=4, exchange_ids=[1, 2], session_id="ignored"),
    ))
    assert line["stock_id"] == 4
    assert line["exchange_ids"] == [1, 2]
    assert "exchange_id" not in line
    assert "session_id" not in line


def test_setup_logging_replaces_previous_handler():
    root = logging.getLogger()
    first = setup_logging("DEBUG", "json")
    second = setup_logging("WARNING", "text")
    try:
        assert first not in root.handlers
        assert second in root.handlers
        assert root.level == logging.WARNING
        assert not isinstance(second.formatter, JSONFormatter)
    finally:
        root.removeHandler(second)
