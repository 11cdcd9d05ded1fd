"""
Logging setup for the leadership assessment service.

Everything logs under the ``leadership`` logger. Records carry the current
submission context (user, assessment, operation) so a failed save can be
traced back to the operation that produced it.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
import time
from collections.abc import Callable
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from types import TracebackType
from typing import Any, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

ROOT_LOGGER = "leadership"
CONTEXT_FIELDS = ("user_id", "assessment_id", "operation")


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        # Set by callers passing extra=log_error_details(...)
        if hasattr(record, "error_type"):
            entry["error"] = {
                "type": record.error_type,
                "details": getattr(record, "error_details", None),
            }

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class ContextFilter(logging.Filter):
    """Copies the active log context onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in current_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


# Each request thread or task sees its own context
_log_context: ContextVar[dict[str, Any] | None] = ContextVar("leadership_log_context", default=None)


def current_context() -> dict[str, Any]:
    return dict(_log_context.get() or {})


def set_context(**kwargs: Any) -> None:
    """
    Add fields to the log context.

    Example:
        >>> set_context(assessment_id=12)
    """
    _log_context.set({**current_context(), **kwargs})


class LogContext:
    """Extend the log context for a block; the previous context is restored on exit."""

    def __init__(self, **kwargs: Any):
        self.fields = kwargs
        self._token: Token[dict[str, Any] | None] | None = None

    def __enter__(self) -> LogContext:
        self._token = _log_context.set({**current_context(), **self.fields})
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    structured: bool = True,
    enable_console: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure the ``leadership`` logger and the noisy third-party ones.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional rotating log file; always written as JSON
        structured: JSON console output instead of plain text
        enable_console: Log to stdout
        max_bytes: Size at which the log file rotates
        backup_count: Number of rotated files to keep

    Example:
        >>> setup_logging(level="DEBUG", log_file="./logs/app.log")
    """
    handlers: dict[str, dict[str, Any]] = {}

    if enable_console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "json" if structured else "plain",
            "filters": ["context"],
            "stream": "ext://sys.stdout",
        }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filters": ["context"],
            "filename": log_file,
            "maxBytes": max_bytes,
            "backupCount": backup_count,
            "encoding": "utf-8",
        }

    if not handlers:
        handlers["null"] = {"class": "logging.NullHandler"}

    names = list(handlers)
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": StructuredFormatter},
                "plain": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "filters": {"context": {"()": ContextFilter}},
            "handlers": handlers,
            "loggers": {
                ROOT_LOGGER: {"level": level, "handlers": names, "propagate": False},
                "sqlalchemy.engine": {"level": "WARNING", "handlers": names, "propagate": False},
                "uvicorn.access": {"level": "WARNING", "handlers": names, "propagate": False},
            },
            "root": {"level": "WARNING", "handlers": names},
        }
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger namespaced under ``leadership``.

    Example:
        >>> get_logger("scoring").name
        'leadership.scoring'
    """
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_operation(
    operation: str, logger: logging.Logger | None = None
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Log start, success and failure of an application operation.

    Example:
        >>> @log_operation("save_assessment")
        ... def save_assessment(session, answers):
        ...     pass
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            func_logger = logger or get_logger(func.__module__)
            with LogContext(operation=operation):
                func_logger.info("Starting %s", operation)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    func_logger.error("Failed %s: %s", operation, e, exc_info=True)
                    raise
                func_logger.info("Completed %s", operation)
                return result

        return wrapper

    return decorator


def log_database_operation(operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Time a repository call and log failures.

    Example:
        >>> @log_database_operation("assessment.create")
        ... def create(self, **fields):
        ...     pass
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            db_logger = get_logger("database")
            started = time.perf_counter()
            with LogContext(operation=f"db.{operation}"):
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    db_logger.error(
                        "%s failed after %.3fs: %s",
                        operation,
                        time.perf_counter() - started,
                        e,
                        exc_info=True,
                    )
                    raise
                db_logger.debug("%s took %.3fs", operation, time.perf_counter() - started)
                return result

        return wrapper

    return decorator


ENVIRONMENT_PRESETS: dict[str, dict[str, Any]] = {
    "production": {"level": "INFO", "log_file": "./logs/production.log", "structured": True},
    "test": {"level": "WARNING", "log_file": None, "structured": False, "enable_console": False},
    "development": {"level": "DEBUG", "log_file": "./logs/development.log", "structured": False},
}


def configure_test_logging() -> None:
    setup_logging(**ENVIRONMENT_PRESETS["test"])


def auto_configure_logging() -> None:
    """Pick a preset from the ENVIRONMENT variable (development by default)."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    setup_logging(**ENVIRONMENT_PRESETS.get(env, ENVIRONMENT_PRESETS["development"]))
    get_logger(__name__).info("Logging configured for %s environment", env)


if not logging.getLogger().handlers:
    auto_configure_logging()
