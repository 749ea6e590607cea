"""
Unit tests for logging setup.
"""
import logging

from core.logger import set_log_level, setup_logger


def test_setup_logger_uses_env_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    logger = setup_logger("donation_split.test_env_level")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1


def test_setup_logger_unknown_level_falls_back_to_info():
    logger = setup_logger("donation_split.test_unknown_level", level="verbose")
    assert logger.level == logging.INFO


def test_setup_logger_does_not_duplicate_handlers():
    first = setup_logger("donation_split.test_handlers")
    second = setup_logger("donation_split.test_handlers")
    assert first is second
    assert len(second.handlers) == 1


def test_set_log_level_relevels_configured_loggers():
    """Test loggers built at import time follow the level chosen at startup."""
    logger = setup_logger("donation_split.test_relevel", level="INFO")
    unrelated = logging.getLogger("donation_split.test_unrelated")
    unrelated.setLevel(logging.ERROR)

    set_log_level("DEBUG")
    try:
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.DEBUG
        assert unrelated.level == logging.ERROR
    finally:
        set_log_level("INFO")
