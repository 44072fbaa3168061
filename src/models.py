"""Shared Pydantic data models for line-gemini-relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class FallbackReason(str, Enum):
    NO_RESPONSE = "no_response"
    REQUEST_FAILED = "request_failed"


class AuditEventType(str, Enum):
    WEBHOOK_BATCH = "webhook_batch"
    MESSAGE_RELAYED = "message_relayed"
    GENERATION_FALLBACK = "generation_fallback"
    PIPELINE_ERROR = "pipeline_error"
    MALFORMED_REQUEST = "malformed_request"


class RiskLevel(str, Enum):
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Generation Models ---


class GenerationResult(BaseModel):
    """Reply text from the generation API, or a tagged fallback."""

    model_config = ConfigDict(frozen=True)

    text: str
    fallback: FallbackReason | None = None

    @property
    def ok(self) -> bool:
        return self.fallback is None


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    action: str
    result: str  # "success" | "fallback" | "failure" | "rejected"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
