"""
Relay Logging
=============
Structured log formatters and root logger setup.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from io import StringIO
from typing import Any, Optional, TextIO

from .config import LoggingConfig
from .middleware.request_context import RequestContextFilter


# Attributes every LogRecord carries; anything else came in via `extra`
_RECORD_ATTRIBUTES = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "asctime", "taskName",
))

MASK = "***MASKED***"


def _format_traceback(exc_info) -> str:
    if not exc_info:
        return ""
    sio = StringIO()
    traceback.print_exception(exc_info[0], exc_info[1], exc_info[2], file=sio)
    return sio.getvalue()


# =============================================================================
# Log Formatters
# =============================================================================

class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def __init__(self, mask_fields: Optional[list[str]] = None):
        super().__init__()
        self.mask_fields = set(f.lower() for f in (mask_fields or []))

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES:
                continue
            if self._is_masked(key):
                value = MASK
            log_dict[key] = value

        if record.exc_info:
            log_dict["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": _format_traceback(record.exc_info) or None,
            }

        return json.dumps(log_dict, default=str)

    def _is_masked(self, key: str) -> bool:
        lowered = key.lower()
        return any(field in lowered for field in self.mask_fields)


class ConsoleFormatter(logging.Formatter):
    """Console-friendly log formatter with colors."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        request_id = getattr(record, "request_id", "-")
        formatted = (
            f"{timestamp} {color}{level}{self.RESET} [{request_id}] {record.getMessage()}"
        )

        if record.exc_info:
            formatted += "\n" + _format_traceback(record.exc_info)

        return formatted


class TextFormatter(logging.Formatter):
    """Plain text log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        request_id = getattr(record, "request_id", "-")

        formatted = (
            f"{timestamp} {level} {record.name} request_id={request_id} - "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += "\n" + _format_traceback(record.exc_info)

        return formatted


FORMATTERS = {
    "json": JSONFormatter,
    "console": ConsoleFormatter,
    "text": TextFormatter,
}


# =============================================================================
# Setup
# =============================================================================

def build_formatter(config: LoggingConfig) -> logging.Formatter:
    """Formatter named by the config; unknown names fall back to JSON."""
    if config.format == "json" or config.format not in FORMATTERS:
        return JSONFormatter(mask_fields=config.mask_fields)
    return FORMATTERS[config.format]()


def configure_logging(config: LoggingConfig, stream: Optional[TextIO] = None) -> logging.Handler:
    """
    Install a single stream handler on the root logger.

    Replaces existing root handlers, so calling it twice does not duplicate
    output. Returns the installed handler.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(build_formatter(config))
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    return handler
