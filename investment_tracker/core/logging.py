"""
Logging configuration.

- **Console handler**: human-readable, colour-coded lines for local development.
- **Rotating JSON file**: one JSON object per line for log aggregation.
- **Error-only file**: a separate rotating stream holding ERROR and above.
- **Request-ID correlation**: ``RequestIDFilter`` copies the id stored by
  ``RequestIDMiddleware`` onto every record emitted while a request is served.

Call ``setup_logging()`` once during application startup.  Modules simply
use ``logging.getLogger(__name__)``.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from investment_tracker.core.config import settings

# Set by RequestIDMiddleware for the lifetime of a request.
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_FILE_NAME = "investment-tracker.log"
ERROR_LOG_FILE_NAME = "investment-tracker-error.log"

_EXTRA_FIELDS = ("status_code", "method", "path", "elapsed_ms", "procedure")


class RequestIDFilter(logging.Filter):
    """Attach the current request id (if any) to each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_ctx.get()
        return True


class JSONFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Output example::

        {"timestamp": "2024-01-15T10:30:00.123+00:00", "level": "INFO",
         "logger": "investment_tracker.services.investment_service",
         "message": "Created investment 7 (AAPL)", "module": "investment_service",
         "function": "create_investment", "line": 42, "request_id": "…"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_entry["request_id"] = request_id

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colourised single-line formatter for terminals."""

    COLOURS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        colour = self.COLOURS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%S"
        )
        request_id = getattr(record, "request_id", None)
        rid_str = f" [{request_id[:8]}]" if request_id else ""

        line = (
            f"{timestamp} | {colour}{record.levelname:<8}{self.RESET} | "
            f"{record.name}{rid_str} | {record.getMessage()}"
        )
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _rotating_handler(path: str, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=path,
        maxBytes=settings.LOG_FILE_MAX_BYTES,
        backupCount=settings.LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIDFilter())
    return handler


def setup_logging(log_dir: Optional[str] = None) -> None:
    """
    Configure the root logger with console + rotating file handlers.

    Idempotent: returns early when the root logger already has handlers.
    ``DEBUG=true`` forces DEBUG level and SQL echo; otherwise ``LOG_LEVEL``
    decides the root level.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    level = (
        logging.DEBUG
        if settings.DEBUG
        else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    )
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.addFilter(RequestIDFilter())
    root_logger.addHandler(console_handler)

    log_dir = log_dir or settings.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, LOG_FILE_NAME)
    root_logger.addHandler(_rotating_handler(log_path, level))
    root_logger.addHandler(
        _rotating_handler(os.path.join(log_dir, ERROR_LOG_FILE_NAME), logging.ERROR)
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.DEBUG if settings.DEBUG else logging.WARNING
    )

    root_logger.info(
        "Logging initialized: level=%s, file=%s, max_size=%s MB, backups=%d",
        logging.getLevelName(level),
        log_path,
        settings.LOG_FILE_MAX_BYTES // (1024 * 1024),
        settings.LOG_FILE_BACKUP_COUNT,
    )
