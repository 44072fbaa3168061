"""Tests for environment-driven relay configuration."""

from __future__ import annotations

import pytest

from src.config import DEFAULT_APOLOGY_TEXT, DEFAULT_ERROR_TEXT, RelayConfig

_REQUIRED = {
    "LINE_CHANNEL_ACCESS_TOKEN": "line-token",
    "LINE_CHANNEL_SECRET": "line-secret",
    "GEMINI_API_KEY": "gemini-key",
}

_OPTIONAL = (
    "PORT", "HOST", "GEMINI_MODEL", "GEMINI_API_BASE", "LINE_API_BASE",
    "HTTP_TIMEOUT_SECONDS", "PERSONA_PATH", "KNOWLEDGE_PATH",
    "WEBHOOK_CONCURRENT_EVENTS", "AUDIT_LOG_PATH", "LOG_LEVEL",
)


@pytest.fixture
def base_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _OPTIONAL:
        monkeypatch.delenv(name, raising=False)
    for name, value in _REQUIRED.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


def test_defaults(base_env: pytest.MonkeyPatch) -> None:
    config = RelayConfig.from_env()
    assert config.line_access_token == "line-token"
    assert config.line_channel_secret == "line-secret"
    assert config.gemini_api_key == "gemini-key"
    assert config.port == 3000
    assert config.gemini_model == "gemini-2.0-flash"
    assert config.line_api_base == "https://api.line.me"
    assert config.http_timeout_seconds == 30.0
    assert config.concurrent_events is False
    assert config.audit_log_path is None
    assert config.error_text == DEFAULT_ERROR_TEXT
    assert config.apology_text == DEFAULT_APOLOGY_TEXT


def test_overrides(base_env: pytest.MonkeyPatch) -> None:
    base_env.setenv("PORT", "8080")
    base_env.setenv("GEMINI_MODEL", "gemini-1.5-pro")
    base_env.setenv("HTTP_TIMEOUT_SECONDS", "5.5")
    base_env.setenv("WEBHOOK_CONCURRENT_EVENTS", "True")
    base_env.setenv("AUDIT_LOG_PATH", "/tmp/audit.jsonl")
    base_env.setenv("LOG_LEVEL", "debug")

    config = RelayConfig.from_env()
    assert config.port == 8080
    assert config.gemini_model == "gemini-1.5-pro"
    assert config.http_timeout_seconds == 5.5
    assert config.concurrent_events is True
    assert config.audit_log_path == "/tmp/audit.jsonl"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("missing", sorted(_REQUIRED))
def test_missing_secret_fails_fast(base_env: pytest.MonkeyPatch, missing: str) -> None:
    base_env.delenv(missing)
    with pytest.raises(KeyError, match=missing):
        RelayConfig.from_env()


def test_invalid_port_rejected(base_env: pytest.MonkeyPatch) -> None:
    from pydantic import ValidationError

    base_env.setenv("PORT", "70000")
    with pytest.raises(ValidationError):
        RelayConfig.from_env()
