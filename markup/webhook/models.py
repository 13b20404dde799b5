"""Data models for the outbound webhook relay."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid in a JSON body")


def loads_json(raw: str | bytes) -> Any:
    """Parse JSON, refusing NaN and Infinity, which cannot be re-sent as JSON."""
    return json.loads(raw, parse_constant=_reject_constant)


class WebhookRequest(BaseModel):
    """A payload to deliver to a user-configured destination."""

    model_config = ConfigDict(populate_by_name=True)

    webhook_url: str = Field(alias="webhookUrl")
    payload: dict[str, Any]


@dataclass
class WebhookResult:
    """What the destination said. ``status`` is the destination's HTTP status."""

    success: bool
    status: int
    response_body: str
    error: str | None = None

    def to_response(self) -> tuple[dict[str, Any], int]:
        """JSON body and HTTP status for the relay's own caller."""
        if self.success:
            return {
                "success": True,
                "status": self.status,
                "response": self.response_body,
            }, 200
        return {"success": False, "status": self.status, "error": self.error}, 502


class Comment(BaseModel):
    """A pinned comment, as sent in ``new_comment`` notifications.

    ``x`` and ``y`` are percentages of the framed page's width and height.
    """

    id: str
    text: str
    page_url: str = Field(alias="pageUrl")
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)
    assignee: str | None = None
    priority: Literal["low", "medium", "high"] = "medium"
    created_at: str = Field(alias="createdAt")
    number: int = Field(ge=1)

    model_config = ConfigDict(populate_by_name=True)


@dataclass
class NotificationOutcome:
    success: bool
    error: str | None = None
    result: WebhookResult | None = None
