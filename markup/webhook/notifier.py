"""Comment notifications built on top of the relay."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from markup.errors import WebhookDeliveryError
from markup.webhook.models import Comment, NotificationOutcome, WebhookRequest
from markup.webhook.relay import WebhookRelay

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def build_comment_payload(comment: Comment) -> dict[str, Any]:
    return {
        "event": "new_comment",
        "timestamp": _timestamp(),
        "data": {
            "comment_id": comment.id,
            "comment_text": comment.text,
            "page_url": comment.page_url,
            "position": {"x_percent": comment.x, "y_percent": comment.y},
            "assignee": comment.assignee,
            "priority": comment.priority,
            "created_at": comment.created_at,
            "comment_number": comment.number,
        },
    }


def build_test_payload() -> dict[str, Any]:
    return {
        "event": "test",
        "timestamp": _timestamp(),
        "data": {
            "message": "Test webhook from Markup Comments",
            "comment_text": "This is a test comment",
            "page_url": "https://example.com",
            "priority": "medium",
        },
    }


class CommentNotifier:
    """Sends comment events to a webhook.

    Delivery problems come back as a failed NotificationOutcome and are
    never raised: a comment is saved whether or not its webhook fires.
    """

    def __init__(self, relay: WebhookRelay) -> None:
        self._relay = relay

    async def notify_new_comment(self, webhook_url: str, comment: Comment) -> NotificationOutcome:
        return await self.deliver(
            WebhookRequest(webhook_url=webhook_url, payload=build_comment_payload(comment)),
        )

    async def send_test(self, webhook_url: str) -> NotificationOutcome:
        return await self.deliver(
            WebhookRequest(webhook_url=webhook_url, payload=build_test_payload()),
        )

    async def deliver(self, request: WebhookRequest) -> NotificationOutcome:
        try:
            result = await self._relay.relay(request)
        except WebhookDeliveryError as exc:
            logger.warning("Webhook to %s not delivered: %s", request.webhook_url, exc)
            return NotificationOutcome(success=False, error=str(exc))
        return NotificationOutcome(success=result.success, error=result.error, result=result)
