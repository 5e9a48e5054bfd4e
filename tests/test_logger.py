"""
Unit tests for logging helpers.
"""
import logging

from core.logger import BearerRedactingFilter, resolve_level, setup_logger, truncate_for_log


def make_record(msg, *args):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_bearer_token_is_redacted():
    record = make_record("Auth header: %s", "Bearer eyJhbGciOi.payload.sig")

    assert BearerRedactingFilter().filter(record) is True
    assert record.getMessage() == "Auth header: Bearer [REDACTED]"


def test_message_without_token_is_untouched():
    record = make_record("Processing note for user: %s", "user-1")

    BearerRedactingFilter().filter(record)

    assert record.args == ("user-1",)
    assert record.getMessage() == "Processing note for user: user-1"


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("NOT-A-LEVEL") == logging.INFO
    assert resolve_level(None) == logging.INFO


def test_setup_logger_tolerates_bad_env_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    logger = setup_logger("tests.bad_level")

    assert logger.level == logging.INFO


def test_setup_logger_attaches_one_redacting_handler():
    logger = setup_logger("tests.handlers")
    setup_logger("tests.handlers")

    assert len(logger.handlers) == 1
    assert any(isinstance(f, BearerRedactingFilter) for f in logger.handlers[0].filters)


def test_truncate_for_log():
    assert truncate_for_log("short") == "short"
    assert truncate_for_log("x" * 120) == "x" * 100 + "..."
    assert truncate_for_log({"a": 1}, limit=3) == "{'a..."
