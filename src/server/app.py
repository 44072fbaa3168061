"""FastAPI application exposing the LINE webhook."""

from __future__ import annotations

import json
import logging

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from src.audit.logger import AuditLogger
from src.config import RelayConfig
from src.models import AuditEvent, AuditEventType, RiskLevel
from src.prompt.builder import PromptBuilder, PromptContext
from src.webhook.gemini import GeminiClient
from src.webhook.handler import WebhookHandler
from src.webhook.line import LineMessagingClient
from src.webhook.models import InboundBatch

logger = logging.getLogger(__name__)

_MAX_WEBHOOK_BODY_SIZE = 1024 * 1024  # 1 MiB
HEALTH_TEXT = "LINE Chatbot Webhook is running!"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    config = RelayConfig.from_env()
    configure_logging(config.log_level)
    return create_app(config)


def build_handler(
    config: RelayConfig,
    audit_logger: AuditLogger | None = None,
) -> WebhookHandler:
    """Wire the pipeline components from config."""
    context = PromptContext.from_files(config.persona_path, config.knowledge_path)
    generator = GeminiClient(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        api_base=config.gemini_api_base,
        timeout=config.http_timeout_seconds,
        no_response_text=config.no_response_text,
        error_text=config.error_text,
    )
    messenger = LineMessagingClient(
        access_token=config.line_access_token,
        api_base=config.line_api_base,
        timeout=config.http_timeout_seconds,
    )
    return WebhookHandler(
        prompt_builder=PromptBuilder(context),
        generator=generator,
        messenger=messenger,
        apology_text=config.apology_text,
        concurrent=config.concurrent_events,
        audit_logger=audit_logger,
    )


def create_app(
    config: RelayConfig,
    handler: WebhookHandler | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the relay app. ``handler`` may be injected for tests."""
    if audit_logger is None and config.audit_log_path:
        audit_logger = AuditLogger.from_env(config.audit_log_path)
    if handler is None:
        handler = build_handler(config, audit_logger)

    # Inbound requests are not signature-checked; the channel secret is unused.
    logger.info("LINE webhook signature verification is disabled")

    app = FastAPI(docs_url=None, redoc_url=None)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return HEALTH_TEXT

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/webhook")
    async def webhook(request: Request) -> Response:
        body = await request.body()
        if len(body) > _MAX_WEBHOOK_BODY_SIZE:
            return JSONResponse({"error": "Request body too large"}, status_code=413)

        try:
            batch = InboundBatch.model_validate(json.loads(body))
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
            logger.warning("Malformed webhook payload: %s", type(exc).__name__)
            if audit_logger:
                audit_logger.log(AuditEvent(
                    event_type=AuditEventType.MALFORMED_REQUEST,
                    source_ip=request.client.host if request.client else None,
                    action="POST /webhook",
                    result="rejected",
                    risk_level=RiskLevel.MEDIUM,
                    details={"error": type(exc).__name__},
                ))
            return JSONResponse({"error": "Malformed webhook payload"}, status_code=400)

        logger.debug("LINE webhook batch: %s", batch.model_dump(by_alias=True))
        await handler.handle(batch)
        # Acknowledge unconditionally; per-event outcomes never change this.
        return PlainTextResponse("OK")

    return app


def main() -> None:
    config = RelayConfig.from_env()
    configure_logging(config.log_level)
    logger.info("Server listening on port %d", config.port)
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
