"""Data models for the LINE webhook relay pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# --- Inbound payload (LINE Messaging API webhook body) ---


class InboundMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str | None = None
    text: str | None = None


class InboundEvent(BaseModel):
    """One webhook event. Only text messages are actionable."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str | None = None
    message: InboundMessage | None = None
    reply_token: str | None = Field(default=None, alias="replyToken")

    def as_text_message(self) -> TextMessage | None:
        """Return the actionable projection, or None if this event is ignored."""
        if self.type != "message" or self.message is None:
            return None
        if self.message.type != "text":
            return None
        return TextMessage(
            user_message=self.message.text or "",
            reply_token=self.reply_token or "",
        )


class InboundBatch(BaseModel):
    """Webhook request body.

    Only ``events`` itself must be a list; its elements stay raw until
    ``parse_event`` so one odd event cannot reject the whole batch.
    """

    model_config = ConfigDict(extra="allow")

    events: list[Any]


def parse_event(raw: Any) -> InboundEvent | None:
    """Validate one raw event; None if its shape is unusable."""
    try:
        return InboundEvent.model_validate(raw)
    except ValidationError:
        logger.debug("Ignoring malformed webhook event: %r", raw)
        return None


# --- Pipeline values ---


@dataclass(frozen=True)
class TextMessage:
    """A text message event reduced to what the relay needs."""

    user_message: str
    reply_token: str


@dataclass
class BatchAcknowledgement:
    """Outcome counts for one webhook batch. Never affects the HTTP status."""

    relayed: int = 0
    ignored: int = 0
    failed: int = 0
