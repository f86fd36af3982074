"""Structured logging configuration for the offer diagnostic service."""

import logging
import sys
from typing import Any

# Correlation fields promoted to top-level keys when passed as context
_CORRELATION_FIELDS = ("evaluation_id", "stage")


def _render(value: Any) -> str:
    text = str(value)
    if " " in text or "=" in text:
        return f'"{text}"'
    return text


class StructuredFormatter(logging.Formatter):
    """Key=value structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured output."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        for field in _CORRELATION_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        # Remaining context, in a stable order
        if hasattr(record, "extra_data"):
            for key in sorted(record.extra_data):
                log_data[key] = record.extra_data[key]

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info).splitlines()[-1]

        return " ".join(f"{k}={_render(v)}" for k, v in log_data.items())


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)

        try:
            from offer_diagnostic.core.config import get_settings

            settings = get_settings()
            if settings.OFFER_DIAGNOSTIC_ENV == "dev":
                logger.setLevel(logging.DEBUG)
            else:
                logger.setLevel(logging.INFO)
        except Exception:
            # Default to INFO if settings not available
            logger.setLevel(logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields; evaluation_id and stage become top-level keys
    """
    extra: dict[str, Any] = {}
    for field in _CORRELATION_FIELDS:
        if field in kwargs:
            extra[field] = kwargs.pop(field)
    extra["extra_data"] = kwargs

    logger.log(level, msg, extra=extra)
