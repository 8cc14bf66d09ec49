"""Loguru setup for the storefront API.

Every record carries the request id of the request that produced it (``-``
outside a request) and passes through :func:`sanitize_record` before it
reaches a sink, so tokens, secrets and passwords never land on disk.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>req={extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_NO_REQUEST = "-"
_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default=_NO_REQUEST)

# Libraries that are chatty at INFO.
_QUIET_LOGGERS = {"werkzeug": logging.INFO, "sqlalchemy.engine": logging.WARNING}


def default_log_file() -> Path:
    configured = os.getenv("LOG_FILE")
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parents[2] / "instance" / "storefront.log"


class _InterceptHandler(logging.Handler):
    """Forwards stdlib logging (werkzeug, SQLAlchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        _logger.opt(depth=6, exception=record.exc_info).bind(
            correlation_id=_CORRELATION_ID.get()
        ).log(level, record.getMessage())


class ContextualLogger:
    """Proxy for loguru that binds the current request id on every call."""

    def __getattr__(self, name):  # pragma: no cover
        bound = _logger.bind(correlation_id=_CORRELATION_ID.get())
        return getattr(bound, name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or _NO_REQUEST)


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set(_NO_REQUEST)


def setup_logging(
    level: str | None = None,
    *,
    debug_mode: bool = False,
    log_file: Path | None = None,
) -> Path:
    """Install the stderr and file sinks; returns the file the API logs to."""
    level = (level or os.getenv("LOG_LEVEL") or ("DEBUG" if debug_mode else "INFO")).upper()
    target = log_file or default_log_file()
    target.parent.mkdir(parents=True, exist_ok=True)

    common: dict[str, Any] = {
        "level": level,
        "format": LOG_FORMAT,
        "filter": sanitize_record,
        "backtrace": False,
        "diagnose": False,
    }
    _logger.remove()
    _logger.configure(extra={"correlation_id": _NO_REQUEST})
    _logger.add(sys.stderr, colorize=True, **common)
    _logger.add(str(target), colorize=False, enqueue=True, mode="a", encoding="utf-8", **common)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
    return target


logger = ContextualLogger()

__all__ = [
    "logger",
    "setup_logging",
    "set_correlation_id",
    "clear_correlation_id",
    "get_correlation_id",
    "default_log_file",
]
