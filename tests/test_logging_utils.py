"""
Tests for logging setup (services.logging_utils).
"""

from __future__ import annotations

import json
import logging

from services.logging_utils import JsonFormatter, configure_logging, get_logger


def _record(**extra):
    record = logging.LogRecord("spam.test", logging.INFO, __file__, 1, "saved %s", ("email",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JsonFormatter().format(_record(email_id="abc", spam_score=42))
    data = json.loads(line)
    assert data["message"] == "saved email"
    assert data["level"] == "INFO"
    assert data["logger"] == "spam.test"
    assert data["email_id"] == "abc"
    assert data["spam_score"] == 42
    assert "args" not in data
    assert "pathname" not in data


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    configure_logging(force=True)
    try:
        assert logging.getLogger().level == logging.WARNING
    finally:
        monkeypatch.delenv("LOG_LEVEL")
        configure_logging(force=True)


def test_json_format_from_env(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "json")
    configure_logging(force=True)
    try:
        handlers = logging.getLogger().handlers
        assert any(isinstance(h.formatter, JsonFormatter) for h in handlers)
    finally:
        monkeypatch.delenv("LOG_FORMAT")
        configure_logging(force=True)


def test_get_logger():
    logger = get_logger("spam.test")
    assert logger.name == "spam.test"
    logger.info("smoke", extra={"email_id": "abc"})
