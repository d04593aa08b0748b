"""Structured Logging — JSON formatter and setup for host applications.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (deferred_id, state, target_state, ...) surfaced when present
    - The library never configures logging on import; hosts call setup_logging

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - Defaults for level and format come from Settings when not passed
"""

import logging
import json
from datetime import datetime, timezone

from deferred.config import get_settings

EXTRA_FIELDS = (
    "deferred_id", "state", "target_state", "error_code", "input_count",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(
    level: str | None = None, fmt: str | None = None,
) -> logging.Handler:
    """Attach a handler for the deferred loggers. Returns the handler."""
    settings = get_settings()
    level = level or settings.log_level
    fmt = fmt or settings.log_format
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    root = logging.getLogger("deferred")
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
