"""
Logging configuration for the donation split pipeline.
Every module logger goes to stdout in one pipe-separated format; the
level can be changed at startup once settings are validated.
"""
import logging
import os
import sys
from typing import List, Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Names of loggers configured through setup_logger
_configured: List[str] = []


def _resolve_level(level: Optional[str]) -> int:
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, log_level, logging.INFO)


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Configure and return a logger instance.

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env LOG_LEVEL or INFO.

    Returns:
        Configured logger instance
    """
    numeric_level = _resolve_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(numeric_level)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    if name not in _configured:
        _configured.append(name)

    return logger


def set_log_level(level: str) -> None:
    """
    Re-level every logger created by setup_logger.

    Module loggers are built at import time from the LOG_LEVEL environment
    variable; the launcher calls this with the validated settings value.

    Args:
        level: Log level name
    """
    numeric_level = _resolve_level(level)
    for name in _configured:
        logger = logging.getLogger(name)
        logger.setLevel(numeric_level)
        for handler in logger.handlers:
            handler.setLevel(numeric_level)
