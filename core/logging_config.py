import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.settings import Settings, settings

# Attributes copied from the active LogContext onto every record
CONTEXT_FIELDS = ("request_id", "path", "method", "status_code", "duration", "page_slug", "block_type")

# Libraries whose INFO output drowns the application's own
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "redis", "httpx")


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for log shippers"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(_context_of(record))
        entry.update(getattr(record, "extra_fields", None) or {})

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Human readable console output for local development"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        fields = {**_context_of(record), **(getattr(record, "extra_fields", None) or {})}
        if fields:
            message += " | " + " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{self.COLORS.get(record.levelname, self.RESET)}{message}{self.RESET}"


def _context_of(record: logging.LogRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


def setup_logging(config: Settings = settings, log_level: Optional[str] = None) -> logging.Logger:
    """Configure the root logger once per process (API or CLI)"""
    level = (log_level or config.LOG_LEVEL).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if config.JSON_LOGS:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(ColoredFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Logger with `*_ctx(msg, **fields)` helpers that attach keyword fields to the record"""
    logger = logging.getLogger(name)

    def log_with_fields(level: int, msg: str, **fields):
        logger.log(level, msg, extra={"extra_fields": fields} if fields else None)

    logger.debug_ctx = lambda msg, **fields: log_with_fields(logging.DEBUG, msg, **fields)
    logger.info_ctx = lambda msg, **fields: log_with_fields(logging.INFO, msg, **fields)
    logger.warning_ctx = lambda msg, **fields: log_with_fields(logging.WARNING, msg, **fields)
    logger.error_ctx = lambda msg, **fields: log_with_fields(logging.ERROR, msg, **fields)

    return logger


class LogContext:
    """Stamp every record created inside the block with the given attributes"""

    def __init__(self, **context):
        self.context = context
        self.previous_factory = None

    def __enter__(self):
        self.previous_factory = logging.getLogRecordFactory()
        previous, context = self.previous_factory, self.context

        def record_factory(*args, **kwargs):
            record = previous(*args, **kwargs)
            for key, value in context.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self.previous_factory)
