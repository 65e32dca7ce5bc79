"""Logging utilities for cacheables.

The library itself only ever asks for named loggers; it never installs
handlers on import. Applications (and the bundled CLI) call
:func:`configure_logging` to get Rich console output and, optionally, JSON
files that log shippers can ingest without custom parsing.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    The ``key``, ``policy``, ``hits``, ``misses`` and ``duration_ms`` extras set
    by the registry and the timing monitor become top-level fields.
    """

    default_time_format = "%Y-%m-%dT%H:%M:%S"

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                self.default_time_format
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        for key in ("key", "policy", "hits", "misses", "duration_ms"):
            if key in record.__dict__:
                payload[key] = record.__dict__[key]
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_handlers(log_dir: Optional[Path], enable_rich: bool) -> Dict[str, Dict[str, Any]]:
    handlers: Dict[str, Dict[str, Any]] = {}
    if log_dir is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": str(log_dir / "cacheables.log"),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
        }
    if enable_rich:
        handlers["console"] = {
            "class": "rich.logging.RichHandler",
            "formatter": "rich",
            "level": "DEBUG",
            "rich_tracebacks": True,
            "show_path": False,
        }
    else:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "json",
        }
    return handlers


def configure_logging(*, level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """Install console (and optionally file) handlers on the root logger.

    ``level`` is a logging level name such as ``"DEBUG"``. Records also go to
    ``cacheables.log`` under ``log_dir`` (or ``$CACHEABLES_LOG_DIR``) when one
    is given; set ``CACHEABLES_RICH=0`` for JSON on the console instead of Rich.
    Each call replaces the previous handlers.
    """

    env_dir = os.environ.get("CACHEABLES_LOG_DIR")
    if log_dir is None and env_dir:
        log_dir = Path(env_dir)
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

    enable_rich = os.environ.get("CACHEABLES_RICH", "1") != "0"
    handlers = _build_handlers(log_dir, enable_rich)

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "cacheables.utils.logging.JsonFormatter",
            },
            "rich": {
                "format": "%(message)s",
                "datefmt": "%H:%M:%S",
            },
        },
        "handlers": handlers,
        "root": {
            "level": level,
            "handlers": list(handlers.keys()),
        },
    }

    logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_quietly(logger: logging.Logger, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
    """Log through ``logger`` but drop any error a handler or filter raises.

    Used on paths that hand a value back to a caller; a broken log sink must
    not turn a served or fetched value into an exception.
    """

    try:
        logger.log(level, msg, *args, **kwargs)
    except Exception:
        pass


__all__ = ["configure_logging", "get_logger", "log_quietly", "JsonFormatter"]
