"""JsonFormatter and settings tests."""

import json
import logging

from app.config.logging import JsonFormatter
from app.config.settings import AppSettings
from app.core.context import correlation_id_ctx


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("app.audit", logging.INFO, __file__, 1, "audit_record_persisted", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extras_and_correlation_id():
    token = correlation_id_ctx.set("corr-1")
    try:
        out = json.loads(JsonFormatter().format(_record(audit_id="a-1", sequence=3)))
    finally:
        correlation_id_ctx.reset(token)
    assert out["message"] == "audit_record_persisted"
    assert out["level"] == "INFO"
    assert out["correlation_id"] == "corr-1"
    assert out["audit_id"] == "a-1"
    assert out["sequence"] == 3
    assert "levelno" not in out


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("STORE_BACKEND", raising=False)
    settings = AppSettings(_env_file=None)
    assert settings.store_backend == "memory"
    assert settings.verify_parent is False


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "redis")
    monkeypatch.setenv("VERIFY_PARENT", "true")
    settings = AppSettings(_env_file=None)
    assert settings.store_backend == "redis"
    assert settings.verify_parent is True
