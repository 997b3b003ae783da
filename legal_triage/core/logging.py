"""Structured logging configuration."""

import logging
import sys
from typing import Any

from legal_triage.core.config import settings


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured log output."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured data."""
        # Base format
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "action"):
            log_data["action"] = record.action
        if hasattr(record, "rule_id"):
            log_data["rule_id"] = record.rule_id

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Simple key=value format for readability
        parts = [f"{k}={v}" for k, v in log_data.items()]
        return " ".join(parts)


def setup_logging() -> None:
    """Configure application logging."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    # Set formatter based on environment
    if settings.is_dev:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = StructuredFormatter()

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class ConfigChangeLogger:
    """Logger for changes made to the triage configuration."""

    def __init__(self) -> None:
        self.logger = get_logger("config_change")

    def log(
        self,
        action: str,
        rule_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Log a configuration change event."""
        self.logger.info(
            f"CONFIG: action={action} rule={rule_id or '-'} metadata={metadata or {}}",
            extra={"action": action, "rule_id": rule_id or "-"},
        )


config_change_logger = ConfigChangeLogger()
