"""LINE Messaging API reply client.

Single attempt, no retry. Delivery failures are logged and dropped: a
reply token is single-use, so there is no second channel to the user.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_REPLY_PATH = "/v2/bot/message/reply"


class LineMessagingClient:
    """Sends text replies through the LINE reply endpoint."""

    def __init__(
        self,
        access_token: str,
        api_base: str = "https://api.line.me",
        timeout: float = 30.0,
    ) -> None:
        self._access_token = access_token
        self._url = f"{api_base.rstrip('/')}{_REPLY_PATH}"
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._url

    def to_reply_body(self, reply_token: str, text: str) -> dict[str, Any]:
        return {
            "replyToken": reply_token,
            "messages": [{"type": "text", "text": text}],
        }

    async def reply(self, reply_token: str, text: str) -> None:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._access_token}",
        }
        try:
            async with httpx.AsyncClient(verify=True, timeout=self._timeout) as client:
                resp = await client.post(
                    self._url,
                    json=self.to_reply_body(reply_token, text),
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            logger.error("Error replying to LINE: %s", exc)
            return

        if not resp.is_success:
            logger.error("LINE reply rejected (%s): %s", resp.status_code, resp.text)
            return
        logger.debug("LINE reply accepted (%s)", resp.status_code)
