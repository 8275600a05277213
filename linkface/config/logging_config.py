"""
Logging setup.

Loggers are plain `logging.getLogger(__name__)`; this module only wires the
root handler once at startup. With LOG_JSON enabled every record becomes one
JSON line: {timestamp, level, logger, message, context?, error?}.
"""

import json
import logging
import sys
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["error"] = {
                "name": exc_type.__name__,
                "message": str(exc_value),
                "stack": self.formatException(record.exc_info),
            }
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure the root logger. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))

    for existing in list(root.handlers):
        if getattr(existing, "_linkface", False):
            root.removeHandler(existing)
    handler._linkface = True
    root.addHandler(handler)


def mask_token(token: str | None) -> str:
    """Keep only the first 8 chars of a token for log output."""
    if not token:
        return ""
    return f"{token[:8]}..."
