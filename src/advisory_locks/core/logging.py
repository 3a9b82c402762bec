"""Logging helpers for advisory locks."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from advisory_locks.core.constants import (
    DEFAULT_LOG_LEVEL,
    ENV_VAR_MAPPING,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
    VALID_LOG_LEVELS,
)

if TYPE_CHECKING:
    from advisory_locks.core.config import LockConfig

PACKAGE_LOGGER_NAME = "advisory_locks"

_LOG_RECORD_RESERVED_FIELDS = set(logging.makeLogRecord({}).__dict__.keys()) | {"message", "asctime", "extra_fields"}
_HANDLER_MARKER_ATTR = "_advisory_locks_handler"


def _safe_record_message(record: logging.LogRecord) -> str:
    try:
        return record.getMessage()
    except Exception:
        # Keep logging resilient when message formatting fails (bad placeholders or broken __str__).
        return f"{getattr(record, 'msg', '')} [log-message-format-error]"


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging output.

    Each log record is a single JSON object on one line. Context attached
    through with_log_context (for example the lock name) is emitted as
    top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _safe_record_message(record),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "thread_name": record.threadName,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if not isinstance(key, str) or key in _LOG_RECORD_RESERVED_FIELDS or key.startswith("_"):
                continue
            log_entry.setdefault(key, value)

        return json.dumps(log_entry, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges contextual fields into record extras."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra")
        merged_extra = dict(self.extra)
        if isinstance(extra, dict):
            merged_extra.update(extra)
        kwargs["extra"] = merged_extra
        return msg, kwargs


def _unwrap_logger(logger: logging.Logger | logging.LoggerAdapter) -> logging.Logger:
    current = logger
    while isinstance(current, logging.LoggerAdapter):
        current = current.logger
    return current


def with_log_context(
    logger: logging.Logger | logging.LoggerAdapter, **context: object
) -> logging.Logger | logging.LoggerAdapter:
    """Return a logger enriched with persistent contextual fields."""
    if not isinstance(logger, (logging.Logger, logging.LoggerAdapter)):
        # Preserve test doubles/mocks that may not satisfy logging interfaces.
        return logger

    existing_context = {}
    if isinstance(logger, logging.LoggerAdapter):
        existing_context = dict(getattr(logger, "extra", None) or {})
    existing_context.update({k: v for k, v in context.items() if v is not None})
    return ContextLoggerAdapter(_unwrap_logger(logger), existing_context)


def _resolve_level(log_level: str | None, config: LockConfig | None = None) -> int:
    if log_level is None:
        if config is not None:
            log_level = config.log_level
        else:
            log_level = os.environ.get(ENV_VAR_MAPPING["log_level"], DEFAULT_LOG_LEVEL)
    if log_level.upper() not in VALID_LOG_LEVELS:
        print(f"Warning: Invalid log level '{log_level}', using {DEFAULT_LOG_LEVEL}", file=sys.stderr)
        log_level = DEFAULT_LOG_LEVEL
    return getattr(logging, log_level.upper())


def setup_logging(
    log_level: str | None = None,
    log_format: str = "text",
    log_file: str | os.PathLike | None = None,
    config: LockConfig | None = None,
) -> logging.Logger:
    """Attach handlers to the package logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format - "text" (default) or "json" for structured logging
        log_file: Optional path for a rotating log file in addition to stderr
        config: Lock configuration whose log_level applies when log_level is None

    Returns:
        The configured ``advisory_locks`` logger

    Priority: 1) Passed parameter, 2) config.log_level, 3) ADVISORY_LOCKS_LOG_LEVEL,
    4) Default INFO.
    Handlers installed by an earlier call are replaced, never stacked.
    """
    numeric_level = _resolve_level(log_level, config)
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    for handler in logger.handlers[:]:
        if getattr(handler, _HANDLER_MARKER_ATTR, False):
            handler.close()
            logger.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # Use RotatingFileHandler to prevent unbounded log growth
        handlers.append(RotatingFileHandler(log_path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUP_COUNT))

    if log_format.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        setattr(handler, _HANDLER_MARKER_ATTR, True)
        logger.addHandler(handler)

    logger.setLevel(numeric_level)
    return logger
