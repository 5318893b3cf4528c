"""Centralized logging setup for envfile.

Provides:
  - a uniform log format
  - stderr logging plus optional file logging with rotation
  - lightweight context binding (stage/env_file)

Library modules only ask for loggers via `get_logger`; handlers are installed
by the command line (or by the host application) through `setup_logging`.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Dict, Optional

DEFAULT_EXTRA_KEYS = {
    "stage": "-",
    "env_file": "-",
}

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(stage)s | %(env_file)s | %(name)s | %(message)s"
LOG_FILENAME = "envfile.log"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3


class _ContextFilter(logging.Filter):
    """Ensure all log records contain the expected extra fields."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, default in DEFAULT_EXTRA_KEYS.items():
            if not hasattr(record, key):
                setattr(record, key, default)
        return True


class ContextLoggerAdapter(logging.LoggerAdapter):
    """A LoggerAdapter that supports `.bind()` for adding context fields."""

    def bind(self, **extra: str) -> "ContextLoggerAdapter":
        merged = {**self.extra, **extra}
        return ContextLoggerAdapter(self.logger, merged)

    def process(self, msg, kwargs):  # noqa: D401
        extra = kwargs.setdefault("extra", {})
        if self.extra:
            extra = {**self.extra, **extra}
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    *,
    level: str = "WARNING",
    log_dir: Optional[Path] = None,
) -> None:
    """Initialize global logging.

    Args:
        level: Logging level (default: WARNING).
        log_dir: Output directory for a rotating log file (no file when None).

    Records always go to stderr as well.
    """

    level = level.upper()
    handlers: Dict[str, Dict[str, object]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
            "filters": ["context"],
        }
    }

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "default",
            "filename": str(log_dir / LOG_FILENAME),
            "maxBytes": LOG_MAX_BYTES,
            "backupCount": LOG_BACKUP_COUNT,
            "encoding": "utf-8",
            "filters": ["context"],
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "context": {
                "()": _ContextFilter,
            }
        },
        "formatters": {
            "default": {
                "format": DEFAULT_LOG_FORMAT,
            }
        },
        "handlers": handlers,
        "root": {
            "level": level,
            "handlers": list(handlers.keys()),
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: Optional[str] = None, **context: str) -> ContextLoggerAdapter:
    """Get a logger with context binding.

    Args:
        name: Logger name (default: root).
        context: Extra fields to bind to every log record.
    """

    base_logger = logging.getLogger(name)
    return ContextLoggerAdapter(base_logger, context)
