"""
Logging configuration for structured JSON logging.
"""
import json
import logging
import sys
from typing import Optional

STRUCTURED_FIELDS = ("city", "mode", "duration_ms", "status", "refreshed")


class StructuredJSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        # Base log entry
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add structured fields if present
        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(log_level: str = "INFO") -> None:
    """Setup structured logging configuration."""
    formatter = StructuredJSONFormatter(datefmt="%Y-%m-%dT%H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stdout is reserved for command output
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    root_logger.addHandler(stderr_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger_with_context(
    name: str, city: Optional[str] = None, mode: Optional[str] = None
) -> logging.Logger:
    """Get logger with contextual information."""
    logger = logging.getLogger(name)

    if city or mode:
        extra_context = {}
        if city:
            extra_context["city"] = city
        if mode:
            extra_context["mode"] = mode

        return logging.LoggerAdapter(logger, extra_context)

    return logger
