"""
Centralised logging helper for starlette-statsd.

This module configures a single root logger that can emit either human-readable
console logs (default) or structured JSON logs suitable for production log
aggregators. The desired format and log-level are controlled with environment
variables so that behaviour can be switched without code changes.

Usage
-----
from starlette_statsd.utils.logger import get_logger
logger = get_logger(__name__)
logger.warning("No statsd server on %s", address)

Applications built with ``create_app`` call ``configure_logging`` with the
level and format from ``Settings``.
"""

from __future__ import annotations

import atexit
import json
import logging
import os
import sys
from datetime import datetime, timezone


_configured: bool = False
_handler: logging.Handler | None = None


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for machine consumption."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"))


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """(Re)configure the root logger.

    *level* and *log_format* come from ``Settings`` when the app is wired; the
    ``LOG_LEVEL`` / ``LOG_FORMAT`` env vars are the fallback for code that only
    calls :func:`get_logger`. Only the handler installed here is replaced, so
    handlers added by the host (pytest, uvicorn) are left alone.
    """

    global _configured, _handler

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = (log_format or os.getenv("LOG_FORMAT", "console")).lower()

    handler: logging.Handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.setLevel(log_level)
    root.addHandler(handler)
    _handler = handler

    access_logger = logging.getLogger("uvicorn.access")
    access_logger.setLevel(os.getenv("UVICORN_LOG_LEVEL", "WARNING").upper())

    if not _configured:
        atexit.register(logging.shutdown)
    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger with the given *name*, ensuring global config is applied."""

    if not _configured:
        configure_logging()
    return logging.getLogger(name or __name__)


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


def reset_logging_for_tests() -> None:
    """Drop the handler installed by :func:`configure_logging` so tests can reconfigure."""

    global _configured, _handler
    root = logging.getLogger()
    if _handler is not None:
        _handler.flush()
        root.removeHandler(_handler)
    root.setLevel(logging.WARNING)
    _handler = None
    _configured = False
