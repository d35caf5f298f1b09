"""Structured Logging — JSON formatter and one-shot setup for the stockhub process.

Invariants:
    - Every JSON line carries timestamp (the record's creation time, UTC), level, logger
      and message
    - Domain extras (stock_id, exchange_id, exchange_ids, error_code, event, path) are
      copied only when the call site passed them
    - setup_logging may run more than once (tests, reloads) without stacking handlers

Design Decisions:
    - JSONFormatter on stdlib logging: no extra dependency, full control of the shape
    - json.dumps(default=str): Decimal prices and ids serialize without custom encoders
"""

import json
import logging
from datetime import datetime, timezone

DOMAIN_EXTRAS = (
    "stock_id", "exchange_id", "exchange_ids", "error_code", "event", "path",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _domain_extras(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in DOMAIN_EXTRAS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_domain_extras(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


_installed: logging.Handler | None = None


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the root handler, replacing the one a previous call installed."""
    global _installed
    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT),
    )
    root = logging.getLogger()
    if _installed is not None:
        root.removeHandler(_installed)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _installed = handler
    return handler
