"""Runtime configuration for the relay, read from environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_NO_RESPONSE_TEXT = (
    "ขออภัยครับ ไม่สามารถรับข้อมูลจากระบบ AI ได้ โปรดลองถามคำถามอีกครั้ง"
)
DEFAULT_ERROR_TEXT = (
    "ขออภัยครับ เกิดข้อผิดพลาดในการประมวลผลคำถามของคุณ โปรดลองอีกครั้งในภายหลัง"
)
DEFAULT_APOLOGY_TEXT = (
    "I'm sorry, I encountered an internal error. Please try again later."
)

_TRUTHY = {"1", "true", "yes", "on"}


class RelayConfig(BaseModel):
    """Secrets and tunables passed explicitly into each component."""

    model_config = ConfigDict(frozen=True)

    line_access_token: str
    line_channel_secret: str  # loaded but not used: no signature verification
    gemini_api_key: str

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta/models"
    line_api_base: str = "https://api.line.me"
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    persona_path: str = "config/persona.txt"
    knowledge_path: str = "config/knowledge.txt"
    concurrent_events: bool = False

    audit_log_path: str | None = None
    log_level: str = "INFO"

    no_response_text: str = DEFAULT_NO_RESPONSE_TEXT
    error_text: str = DEFAULT_ERROR_TEXT
    apology_text: str = DEFAULT_APOLOGY_TEXT

    @classmethod
    def from_env(cls) -> RelayConfig:
        """Build config from the process environment.

        The three secrets are required; a missing one raises KeyError.
        """
        env = os.environ
        return cls(
            line_access_token=env["LINE_CHANNEL_ACCESS_TOKEN"],
            line_channel_secret=env["LINE_CHANNEL_SECRET"],
            gemini_api_key=env["GEMINI_API_KEY"],
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
            gemini_model=env.get("GEMINI_MODEL", "gemini-2.0-flash"),
            gemini_api_base=env.get(
                "GEMINI_API_BASE",
                "https://generativelanguage.googleapis.com/v1beta/models",
            ),
            line_api_base=env.get("LINE_API_BASE", "https://api.line.me"),
            http_timeout_seconds=float(env.get("HTTP_TIMEOUT_SECONDS", "30")),
            persona_path=env.get("PERSONA_PATH", "config/persona.txt"),
            knowledge_path=env.get("KNOWLEDGE_PATH", "config/knowledge.txt"),
            concurrent_events=(
                env.get("WEBHOOK_CONCURRENT_EVENTS", "false").strip().lower() in _TRUTHY
            ),
            audit_log_path=env.get("AUDIT_LOG_PATH") or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
