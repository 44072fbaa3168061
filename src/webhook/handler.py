"""Webhook handler: LINE batch -> prompt -> Gemini -> LINE reply.

Pipeline stages, per text-message event:
1. Build prompt (persona + knowledge + user message)
2. Generate reply text (always resolves, possibly to a fallback)
3. Deliver reply with the event's own reply token
4. Audit log

Any unexpected exception in stages 1-3 is contained to its event and
answered with a best-effort apology; the batch always completes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from src.models import AuditEvent, AuditEventType, RiskLevel
from src.webhook.models import (
    BatchAcknowledgement,
    InboundBatch,
    TextMessage,
    parse_event,
)

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.prompt.builder import PromptBuilder
    from src.webhook.gemini import GeminiClient
    from src.webhook.line import LineMessagingClient

logger = logging.getLogger(__name__)


class WebhookHandler:
    """Drives the relay pipeline for each actionable event in a batch.

    Events run sequentially in arrival order unless ``concurrent`` is set,
    in which case they fan out with ``asyncio.gather``. Either way each
    reply token is only ever paired with its own event's result.
    """

    def __init__(
        self,
        prompt_builder: PromptBuilder,
        generator: GeminiClient,
        messenger: LineMessagingClient,
        apology_text: str,
        concurrent: bool = False,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._prompts = prompt_builder
        self._generator = generator
        self._messenger = messenger
        self._apology_text = apology_text
        self._concurrent = concurrent
        self._audit = audit_logger

    async def handle(self, batch: InboundBatch) -> BatchAcknowledgement:
        ack = BatchAcknowledgement()
        messages: list[TextMessage] = []
        for raw in batch.events:
            event = parse_event(raw)
            message = event.as_text_message() if event else None
            if message is None:
                ack.ignored += 1
                continue
            messages.append(message)

        if self._concurrent:
            outcomes = await asyncio.gather(*(self._process(m) for m in messages))
        else:
            outcomes = [await self._process(m) for m in messages]

        for relayed in outcomes:
            if relayed:
                ack.relayed += 1
            else:
                ack.failed += 1

        logger.info(
            "Webhook batch done: relayed=%d ignored=%d failed=%d",
            ack.relayed, ack.ignored, ack.failed,
        )
        self._write_audit(AuditEvent(
            event_type=AuditEventType.WEBHOOK_BATCH,
            action="handle_batch",
            result="success",
            risk_level=RiskLevel.INFO,
            details={
                "events": len(batch.events),
                "relayed": ack.relayed,
                "ignored": ack.ignored,
                "failed": ack.failed,
            },
        ))
        return ack

    async def _process(self, message: TextMessage) -> bool:
        """Run one event through the pipeline. Returns False if it needed the apology."""
        logger.debug("User message: %r", message.user_message)
        try:
            prompt = self._prompts.build(message.user_message)
            result = await self._generator.generate(prompt)
            await self._messenger.reply(message.reply_token, result.text)
        except Exception:
            logger.exception("Error processing LINE event")
            self._log_event(
                AuditEventType.PIPELINE_ERROR, "failure", RiskLevel.MEDIUM, None,
            )
            await self._send_apology(message.reply_token)
            return False

        if result.ok:
            self._log_event(
                AuditEventType.MESSAGE_RELAYED, "success", RiskLevel.INFO, None,
            )
        else:
            self._log_event(
                AuditEventType.GENERATION_FALLBACK, "fallback", RiskLevel.LOW,
                result.fallback.value if result.fallback else None,
            )
        return True

    async def _send_apology(self, reply_token: str) -> None:
        try:
            await self._messenger.reply(reply_token, self._apology_text)
        except Exception:
            logger.exception("Fallback reply to LINE failed")

    def _log_event(
        self,
        event_type: AuditEventType,
        result: str,
        risk_level: RiskLevel,
        fallback: str | None,
    ) -> None:
        if not self._audit:
            return
        details: dict[str, object] = {}
        if fallback:
            details["fallback"] = fallback
        self._write_audit(AuditEvent(
            event_type=event_type,
            action="relay",
            result=result,
            risk_level=risk_level,
            details=details or None,
        ))

    def _write_audit(self, event: AuditEvent) -> None:
        if not self._audit:
            return
        try:
            self._audit.log(event)
        except OSError as exc:
            logger.warning("Failed to write audit event: %s", exc)
