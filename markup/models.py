"""Shared Pydantic data models for markup."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# --- Enums ---


class AuditEventType(str, Enum):
    PROXY_FETCH = "proxy_fetch"
    PROXY_ERROR = "proxy_error"
    WEBHOOK_RELAY = "webhook_relay"
    WEBHOOK_FAILURE = "webhook_failure"
    INVALID_INPUT = "invalid_input"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    target_url: str | None = None
    action: str
    result: str  # "success" | "failure" | "rejected"
    risk_level: RiskLevel = RiskLevel.INFO
    details: dict[str, object] | None = None
