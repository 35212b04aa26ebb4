"""Unit tests for settings validation and log masking."""
import json
import logging

import pytest
from pydantic import ValidationError

from app.config import Settings, settings
from app.logging_config import (
    HumanFormatter,
    JSONFormatter,
    feedback_id_ctx,
    mask_pii,
    request_id_ctx,
    setup_logging,
)


def test_database_url_takes_precedence():
    s = Settings(DATABASE_URL="sqlite:///./x.db")
    assert s.SQLALCHEMY_DATABASE_URI == "sqlite:///./x.db"


def test_postgres_url_is_assembled():
    s = Settings(DATABASE_URL=None, POSTGRES_USER="u", POSTGRES_PASSWORD="p", POSTGRES_SERVER="db", POSTGRES_DB="fb")
    assert s.SQLALCHEMY_DATABASE_URI == "postgresql://u:p@db/fb"


def test_production_requires_api_key():
    with pytest.raises(ValidationError):
        Settings(APP_ENV="production", DATABASE_URL="postgresql://u:strong@db/fb", OPENAI_API_KEY="")


def test_production_rejects_default_db_password():
    with pytest.raises(ValidationError):
        Settings(APP_ENV="production", DATABASE_URL=None, POSTGRES_PASSWORD="postgres", OPENAI_API_KEY="sk-test")


def test_cors_origins_split():
    s = Settings(BACKEND_CORS_ORIGINS="http://a.test, http://b.test,")
    assert s.cors_origins == ["http://a.test", "http://b.test"]


def test_mask_pii():
    masked = mask_pii('user jane.doe@example.com sent "api_key": "abc123" with sk-abcdefghijkl')
    assert "jane.doe@example.com" not in masked
    assert "j***e@example.com" in masked
    assert "abc123" not in masked
    assert "sk-abcdefghijkl" not in masked


def test_json_formatter_includes_request_id():
    token = request_id_ctx.set("req-1")
    try:
        record = logging.LogRecord("triage", logging.INFO, __file__, 1, "hello %s", ("bob@example.com",), None)
        entry = json.loads(JSONFormatter().format(record))
    finally:
        request_id_ctx.reset(token)
    assert entry["request_id"] == "req-1"
    assert entry["message"] == "hello b***b@example.com"
    assert "feedback_id" not in entry


def test_human_formatter_shows_tracking_ids():
    rid = request_id_ctx.set("req-2")
    fid = feedback_id_ctx.set("fb-9")
    try:
        record = logging.LogRecord("triage", logging.INFO, __file__, 1, "key sk-abcdefghijkl", None, None)
        line = HumanFormatter().format(record)
    finally:
        feedback_id_ctx.reset(fid)
        request_id_ctx.reset(rid)
    assert "[req-2 fb-9]" in line
    assert line.endswith("key sk-***")


def test_setup_logging_honours_level_setting(monkeypatch):
    monkeypatch.setattr(settings, "LOG_LEVEL", "warning")
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        setup_logging()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, HumanFormatter)
    finally:
        root.handlers[:], root.level = saved[0], saved[1]
