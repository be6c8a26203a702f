"""
Logging configuration for the progression engine.

Provides structured logging with JSON output for tooling
and human-readable output for interactive editing sessions.
"""

import logging
import sys
from typing import Any

import orjson
from pydantic import BaseModel

from progression.core.config import get_settings


class LogConfig(BaseModel):
    """Logging configuration model."""

    log_level: str = "INFO"
    log_format: str = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # Whether to output JSON logs
    json_logs: bool = False


# Attributes every LogRecord carries; anything else came in through ``extra``
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # logger.debug("message", extra={"formula": "..."})
        extra_data = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _STANDARD_ATTRS and not k.startswith("_")
        }
        if extra_data:
            log_data["extra"] = extra_data

        return orjson.dumps(log_data, default=str).decode("utf-8")


class ConsoleFormatter(logging.Formatter):
    """
    Console formatter with colors for interactive use.
    """

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with a colored level name."""
        color = self.COLORS.get(record.levelname, self.RESET)
        original = record.levelname
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    log_level: str | None = None,
    json_logs: bool | None = None,
    log_format: str | None = None,
) -> None:
    """
    Set up application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            defaults to ``settings.log_level``
        json_logs: Whether to output JSON logs; defaults to ``settings.json_logs``
        log_format: Custom log format string
    """
    settings = get_settings()
    config = LogConfig(
        log_level=(log_level or settings.log_level).upper(),
        json_logs=settings.json_logs if json_logs is None else json_logs,
    )
    if log_format:
        config.log_format = log_format

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(config.log_level)

    if config.json_logs:
        formatter: logging.Formatter = JSONFormatter(datefmt=config.date_format)
    else:
        formatter = ConsoleFormatter(config.log_format, datefmt=config.date_format)

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # The LALR parser is built once; its debug chatter is not useful
    logging.getLogger("lark").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "log_level": config.log_level,
            "json_logs": config.json_logs,
        },
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


class LoggerMixin:
    """
    Mixin class that provides a logger attribute.

    Classes that inherit from this mixin get a logger named after the class.
    """

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class."""
        return logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)
