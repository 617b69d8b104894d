"""
Log setup shared by the Circles API and engine.

Every record is rendered on one line:
    2026-01-06T14:05:52Z [api] INFO Suggestions for alice: algorithm=mutual, ...

LOG_LEVEL picks the verbosity:
    INFO   request summaries, request writes, proximity fallbacks (default)
    DEBUG  exclusion sizes, generator candidate counts, writer no-ops
    TRACE  PocketBase query params and every candidate score

Call ``configure_logging(source=...)`` once per process; modules then use
``logging.getLogger(__name__)`` (or ``get_logger``) as usual.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_ENV_LEVELS = {"TRACE": TRACE, "DEBUG": logging.DEBUG}

# Loggers that install their own handlers and must be pointed at ours
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Chatty below WARNING; the PocketBase SDK sends through httpx
_QUIET_LOGGERS = ("httpx", "httpcore")


def _trace(self: logging.Logger, message: object, *args: object, **kw: object) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kw)  # type: ignore[arg-type]


logging.Logger.trace = _trace  # type: ignore[attr-defined]


class ISO8601Formatter(logging.Formatter):
    """Render ``<UTC timestamp> [source] LEVEL message``, traceback appended."""

    def __init__(self, source: str = "app"):
        """
        Args:
            source: Tag identifying the emitting process (e.g. "api", "engine")
        """
        super().__init__()
        self.source = source

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        line = f"{stamp} [{self.source}] {record.levelname} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class HealthCheckFilter(logging.Filter):
    """Drop access-log lines for the health endpoints unless the record is DEBUG."""

    HEALTH_PATHS = {"/health", "/api/health"}

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.DEBUG:
            return True
        message = record.getMessage()
        is_access = "GET" in message or "200" in message
        return not (is_access and any(path in message for path in self.HEALTH_PATHS))


def level_from_env(debug: bool | None = None) -> int:
    """Resolve the level from LOG_LEVEL, with ``debug`` forcing at least DEBUG."""
    level = _ENV_LEVELS.get(os.getenv("LOG_LEVEL", "").upper(), logging.INFO)
    if debug and level > logging.DEBUG:
        return logging.DEBUG
    return level


def configure_logging(
    source: str = "app",
    level: int | None = None,
    debug: bool | None = None,
) -> logging.Logger:
    """Send all logging to stdout in the one-line format.

    Args:
        source: Tag shown in brackets on every line
        level: Explicit level; otherwise resolved by ``level_from_env``
        debug: Force DEBUG when no explicit level is given

    Returns:
        The root logger
    """
    if level is None:
        level = level_from_env(debug)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    handler.addFilter(HealthCheckFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers[:] = [handler]
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
