"""
Logging setup.

Records emitted while an analysis runs carry the change key and branch of
that analysis through a context variable. Production output is one JSON
object per line. Development output is a readable line with the same
fields appended in brackets.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

from pullwise.config import Settings

_context: ContextVar[Dict[str, Any]] = ContextVar("pullwise_log_context", default={})

# Attributes present on every LogRecord; anything else arrived through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}

# Third-party loggers that are too chatty at INFO.
QUIET_LOGGERS = ("uvicorn.access", "httpx")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Active context fields, then the record's ``extra`` fields."""
    fields = dict(_context.get())
    for key, value in vars(record).items():
        if key not in _STANDARD_ATTRS and not key.startswith("_"):
            fields[key] = value
    return fields


class JSONFormatter(logging.Formatter):
    """Flat JSON object per record: message, level, context and extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(record_fields(record))

        if record.exc_info:
            payload["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }
        if record.levelno >= logging.ERROR:
            payload["source"] = f"{record.pathname}:{record.lineno} in {record.funcName}"

        return json.dumps(payload, default=str)


class ContextFormatter(logging.Formatter):
    """Readable single-line output with context and extras in brackets."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = record_fields(record)
        if not fields:
            return line
        return line + " [" + " ".join(f"{k}={v}" for k, v in fields.items()) + "]"


def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger.

    JSON output is used in production or when LOG_FORMAT is "json".

    Args:
        settings: Application settings
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    as_json = settings.ENVIRONMENT == "production" or settings.LOG_FORMAT.lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        JSONFormatter() if as_json else ContextFormatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(
        "Logging configured",
        extra={"log_level": settings.LOG_LEVEL, "json_logs": as_json},
    )


class LogContext:
    """
    Adds fields to every record logged inside the block.

    Usage:
        with LogContext(change_key="42", branch="main"):
            logger.info("Analysis started")
    """

    def __init__(self, **fields):
        self.fields = fields
        self._token = None

    def __enter__(self):
        merged = dict(_context.get())
        merged.update(self.fields)
        self._token = _context.set(merged)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _context.reset(self._token)
            self._token = None


def get_log_context() -> Dict[str, Any]:
    """Copy of the fields currently added to every record."""
    return dict(_context.get())
