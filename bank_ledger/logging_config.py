"""
Structured Logging Configuration Module

JSON log lines for ledger operations. Every operation is logged with the
action name, the account it touched, and the before/after figures of its
result under "extra".
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional

from .config import get_config


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(action)s %(resource)s]: %(message)s"

# Structured attributes log_action attaches to a record
STRUCTURED_FIELDS = ("action", "resource", "correlation_id", "extra")


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain text lines; records without structured fields render them as '-'"""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record):
        for name in ("action", "resource"):
            if not hasattr(record, name):
                setattr(record, name, "-")
        return super().format(record)


def setup_logging(level: str = "INFO", logger_name: str = "bank_ledger",
                  log_format: str = "json") -> logging.Logger:
    """
    Attach a single stream handler to a logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the logger
        log_format: "json" or "text"

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(TextFormatter() if log_format == "text" else JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def configure_logging(logger_name: str = "bank_ledger") -> logging.Logger:
    """Set up logging from BANK_LEDGER_LOG_LEVEL and BANK_LEDGER_LOG_FORMAT"""
    settings = get_config()
    return setup_logging(settings.log_level, logger_name, settings.log_format)


def get_logger(name: str = "bank_ledger") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               correlation_id: Optional[str] = None, extra: Optional[dict] = None):
    """
    Log a ledger action with structured data.

    Args:
        logger: Logger instance
        level: Log level name (info, warning, ...)
        message: Log message
        action: Operation performed, e.g. "deposit"
        resource: Resource acted upon, e.g. "account:3"
        correlation_id: Correlation ID for tracing a caller's request
        extra: Additional structured data, usually OperationResult.to_dict()
    """
    fields = {
        "action": action,
        "resource": resource,
        "correlation_id": correlation_id,
        "extra": extra,
    }
    logger.log(
        getattr(logging, level.upper()), message,
        extra={k: v for k, v in fields.items() if v is not None},
        stacklevel=2
    )
