"""Gemini generateContent client.

Single attempt, bounded timeout. Every failure mode resolves to a tagged
fallback result instead of an exception:

- transport error or non-2xx status -> REQUEST_FAILED
- missing/empty ``candidates[0].content.parts[0].text`` -> NO_RESPONSE
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.config import DEFAULT_ERROR_TEXT, DEFAULT_NO_RESPONSE_TEXT
from src.models import FallbackReason, GenerationResult

logger = logging.getLogger(__name__)


def extract_reply_text(data: Any) -> str | None:
    """Walk ``candidates[0].content.parts[0].text``; None if any node is unusable."""
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    if not isinstance(first, dict):
        return None
    content = first.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts:
        return None
    part = parts[0]
    if not isinstance(part, dict):
        return None
    text = part.get("text")
    if not isinstance(text, str) or not text:
        return None
    return text


class GeminiClient:
    """Calls ``{model}:generateContent`` with the API key in the query string."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        api_base: str = "https://generativelanguage.googleapis.com/v1beta/models",
        timeout: float = 30.0,
        no_response_text: str = DEFAULT_NO_RESPONSE_TEXT,
        error_text: str = DEFAULT_ERROR_TEXT,
    ) -> None:
        self._api_key = api_key
        self._url = f"{api_base.rstrip('/')}/{model}:generateContent"
        self._timeout = timeout
        self._no_response_text = no_response_text
        self._error_text = error_text

    @property
    def url(self) -> str:
        return self._url

    def to_request_body(self, prompt: str) -> dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    async def generate(self, prompt: str) -> GenerationResult:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._url,
                    params={"key": self._api_key},
                    json=self.to_request_body(prompt),
                    headers={"Content-Type": "application/json"},
                )
                if not resp.is_success:
                    logger.error(
                        "Gemini API returned %s: %s", resp.status_code, resp.text,
                    )
                    return self._fallback(FallbackReason.REQUEST_FAILED)
                data = resp.json()
        except httpx.HTTPError as exc:
            # str(exc) may embed the request URL, which carries the key.
            logger.error("Error calling Gemini API: %s", type(exc).__name__)
            return self._fallback(FallbackReason.REQUEST_FAILED)
        except ValueError:
            logger.error("Gemini API returned a non-JSON body")
            return self._fallback(FallbackReason.REQUEST_FAILED)

        logger.debug("Gemini API response: %s", data)
        text = extract_reply_text(data)
        if text is None:
            logger.warning("Gemini response structure unexpected or content missing")
            return self._fallback(FallbackReason.NO_RESPONSE)
        return GenerationResult(text=text)

    def _fallback(self, reason: FallbackReason) -> GenerationResult:
        if reason is FallbackReason.NO_RESPONSE:
            return GenerationResult(text=self._no_response_text, fallback=reason)
        return GenerationResult(text=self._error_text, fallback=reason)
