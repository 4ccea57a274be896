"""Logging setup for the dashboard and command-line scripts.

The library modules only create named loggers; handlers are installed
here, by the entry points, never on import.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from . import config

# Structured extras copied into the payload when set on a record
_EXTRA_FIELDS = ("event_id", "property_id", "mortgage_id", "endpoint", "status_code")


class JsonFormatter(logging.Formatter):
    """
    Minimal JSON formatter.
    Includes level, message, logger, timestamp, exception and known extras.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    level = (level or config.LOG_LEVEL).upper()

    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers (streamlit reruns the script on every interaction)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    # Request-level chatter from the HTTP stack stays at WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
