"""Logging configuration for watchgit.

Provides a JSON formatted logger named ``watchgit``. Modules log through
``logging.getLogger(__name__)`` and inherit its handlers.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

LOG_NAME = "watchgit"
LOG_FILE = Path("~/.watchgit.log").expanduser()
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5

# Attributes present on every LogRecord. Anything else is considered an extra field.
DEFAULT_LOG_RECORD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """Formatter returning log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - short description
        base: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in DEFAULT_LOG_RECORD_ATTRS
        }
        if extras:
            base["extra"] = extras
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def _attach_file_handler(
    logger: logging.Logger, path: Path, formatter: logging.Formatter
) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("File logging disabled", extra={"log_file": str(path), "error": str(exc)})
    else:
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


def _reconfigure(logger: logging.Logger, path: Path, console_level: int | str) -> None:
    formatter = JsonFormatter()
    wanted = os.path.abspath(path)
    has_file = False
    for handler in logger.handlers[:]:
        if isinstance(handler, RotatingFileHandler):
            if handler.baseFilename == wanted:
                has_file = True
                continue
            logger.removeHandler(handler)
            handler.close()
        elif isinstance(handler, logging.StreamHandler):
            handler.setLevel(console_level)
    if not has_file:
        _attach_file_handler(logger, path, formatter)


def get_logger(
    *, log_file: Optional[Path] = None, console_level: int | str = logging.WARNING
) -> logging.Logger:
    """Return the configured project logger.

    Handlers are attached on the first call. Later calls apply a new console
    threshold and swap the file handler when ``log_file`` points elsewhere.
    """
    logger = logging.getLogger(LOG_NAME)
    path = log_file if log_file is not None else LOG_FILE
    if logger.handlers:
        _reconfigure(logger, path, console_level)
        return logger

    logger.setLevel(logging.DEBUG)

    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(console_level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    _attach_file_handler(logger, path, formatter)

    logger.propagate = False
    return logger
