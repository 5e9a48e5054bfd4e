"""
Logging configuration for the note ingest service.
Keeps user-entered text out of logs beyond a short prefix and masks
bearer credentials in every record.
"""
import logging
import os
import re
import sys
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE)


class BearerRedactingFilter(logging.Filter):
    """Replaces bearer tokens in log messages with a fixed mask."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = BEARER_PATTERN.sub(r"\1[REDACTED]", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def resolve_level(level: Optional[str]) -> int:
    """Map a level name to its number; unknown names fall back to INFO."""
    value = logging.getLevelName((level or "INFO").upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Configure and return a logger for a service module.

    Args:
        name: Logger name (usually __name__)
        level: Level name. Defaults to env LOG_LEVEL, then INFO.

    Returns:
        Logger writing redacted records to stdout
    """
    log_level = resolve_level(level or os.getenv("LOG_LEVEL"))

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        handler.addFilter(BearerRedactingFilter())
        logger.addHandler(handler)

    return logger


def truncate_for_log(value: Any, limit: int = 100) -> str:
    """
    Shorten a value for logging.

    Args:
        value: Text or object to log
        limit: Maximum number of characters kept

    Returns:
        String of at most ``limit`` characters, with "..." appended when cut
    """
    text = value if isinstance(value, str) else repr(value)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
