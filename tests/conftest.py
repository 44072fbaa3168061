"""Shared test fixtures for line-gemini-relay."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.config import RelayConfig
from src.prompt.builder import PromptContext

PERSONA = "You are a test persona.\nAlways respond in Thai language."
KNOWLEDGE = "Product: Test Panel 550 Wp"


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def prompt_context() -> PromptContext:
    return PromptContext(persona=PERSONA, knowledge=KNOWLEDGE)


@pytest.fixture
def relay_config(tmp_path: Path) -> RelayConfig:
    """RelayConfig pointing at temporary persona/knowledge files."""
    persona = tmp_path / "persona.txt"
    persona.write_text(PERSONA, encoding="utf-8")
    knowledge = tmp_path / "knowledge.txt"
    knowledge.write_text(KNOWLEDGE, encoding="utf-8")
    return make_relay_config(
        persona_path=str(persona),
        knowledge_path=str(knowledge),
    )


# --- Factory functions for test data ---


def make_relay_config(**kwargs: Any) -> RelayConfig:
    """Factory for RelayConfig with sensible defaults."""
    defaults: dict[str, Any] = {
        "line_access_token": "line-token",
        "line_channel_secret": "line-secret",
        "gemini_api_key": "gemini-key",
    }
    defaults.update(kwargs)
    return RelayConfig(**defaults)


def make_text_event(text: str = "hello", reply_token: str = "abc") -> dict[str, Any]:
    return {
        "type": "message",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": "U123"},
        "message": {"id": "1", "type": "text", "text": text},
    }


def make_batch(*events: dict[str, Any]) -> dict[str, Any]:
    return {"destination": "Uabc", "events": list(events)}


def make_gemini_payload(text: str = "hi there") -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": "STOP",
            }
        ],
    }


def make_http_response(
    status_code: int = 200,
    json_data: Any = None,
    text: str = "",
) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.text = text
    resp.json.return_value = json_data if json_data is not None else {}
    return resp


def make_async_client(
    response: MagicMock | None = None,
    side_effect: BaseException | None = None,
) -> AsyncMock:
    """Mock for an ``httpx.AsyncClient`` instance used as an async context manager."""
    client = AsyncMock()
    if side_effect is not None:
        client.post.side_effect = side_effect
    else:
        client.post.return_value = response or make_http_response()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client
