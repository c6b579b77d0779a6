"""Tests for settings and logging setup."""

import json
import logging

import pytest

from ghagent.config import Settings
from ghagent.observability.logging import JSONFormatter, LogContext, get_log_context


def base_settings(**overrides):
    values = {"GITHUB_APP_ID": "1", "GITHUB_WEBHOOK_SECRET": "s"}
    values.update(overrides)
    return Settings(**values)


def test_private_key_file_wins_over_inline_key(tmp_path):
    key_file = tmp_path / "app.pem"
    key_file.write_text("FILE KEY")

    settings = base_settings(GITHUB_APP_KEY=str(key_file), GITHUB_PRIVATE_KEY="INLINE")

    assert settings.read_private_key() == "FILE KEY"


def test_inline_private_key_expands_escaped_newlines():
    settings = base_settings(GITHUB_PRIVATE_KEY="-----BEGIN-----\\nabc\\n-----END-----")

    assert settings.read_private_key() == "-----BEGIN-----\nabc\n-----END-----"


def test_missing_private_key_is_an_error():
    with pytest.raises(ValueError, match="GITHUB_APP_KEY"):
        base_settings().read_private_key()


def test_defaults():
    settings = base_settings()

    assert settings.GITHUB_API_URL == "https://api.github.com"
    assert settings.LLM_PROVIDER == "anthropic"
    assert settings.GITHUB_TIMEOUT_SECONDS == 30.0


def test_json_formatter_includes_extra_and_context():
    record = logging.LogRecord("ghagent.test", logging.INFO, __file__, 1, "hello", None, None)
    record.installation_id = 42

    with LogContext(delivery_id="d-1"):
        assert get_log_context() == {"delivery_id": "d-1"}
        data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "hello"
    assert data["installation_id"] == 42
    assert data["context"] == {"delivery_id": "d-1"}
    assert get_log_context() == {}
