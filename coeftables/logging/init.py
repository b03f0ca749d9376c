from __future__ import annotations

import logging
import os
import sys

"""Logging initialization with labeled prefixes.

Every module of the package logs through the single ``coeftables`` logger:
- INFO|WARN|ERROR|SUMMARY labeled prefixes
- standard logging only
- level taken from ``COEFTABLES_LOG_LEVEL`` (default INFO)

Lookup misses are written here as WARN entries; table loads emit one SUMMARY line.
"""

__all__ = [
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
    "LabeledFormatter",
    "SUMMARY_LEVEL",
    "LOGGER_NAME",
]

# between INFO and WARNING
SUMMARY_LEVEL = 25

LOGGER_NAME = "coeftables"
LOG_LEVEL_ENV = "COEFTABLES_LOG_LEVEL"

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter that prefixes each message with a short level label.

    - INFO: informational messages
    - WARN: warnings, including lookup miss diagnostics
    - ERROR: error messages
    - SUMMARY: table load summaries
    """

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{level_label} {record.getMessage()}"


def _resolve_level() -> int:
    raw = os.getenv(LOG_LEVEL_ENV, "INFO").strip().upper()
    if raw == "WARN":
        raw = "WARNING"
    level = logging.getLevelName(raw)
    # getLevelName returns "Level X" for unknown names
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> logging.Logger:
    """Configure the ``coeftables`` logger with one labeled stdout handler.

    Handlers left on the logger are replaced and propagation is off. A second
    call returns the configured logger unchanged.
    """
    global _logger

    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    level = _resolve_level()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Get the configured package logger, configuring it on first use."""
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    _logger = None
