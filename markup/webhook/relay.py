"""Server-side webhook relay.

Browsers cannot POST to arbitrary third-party hooks (CORS, mixed content),
so the host application hands the payload to this relay, which makes a
single synchronous attempt and reports what the destination answered.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from markup.config import DEFAULT_WEBHOOK_TIMEOUT
from markup.errors import WebhookDeliveryError
from markup.models import AuditEvent, AuditEventType, RiskLevel
from markup.webhook.models import WebhookRequest, WebhookResult

if TYPE_CHECKING:
    from markup.audit.logger import AuditLogger

logger = logging.getLogger(__name__)


class WebhookRelay:
    """POSTs JSON payloads to webhook destinations. No retries, no queue."""

    def __init__(
        self,
        timeout: float = DEFAULT_WEBHOOK_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._audit = audit_logger

    async def relay(self, request: WebhookRequest) -> WebhookResult:
        """Deliver ``request.payload`` to ``request.webhook_url``.

        A non-2xx answer is a normal result with ``success=False``.
        Raises WebhookDeliveryError when the destination is unreachable.
        """
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                follow_redirects=True,
                timeout=self._timeout,
            ) as client:
                resp = await client.post(
                    request.webhook_url,
                    json=request.payload,
                    headers={"Content-Type": "application/json"},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("Webhook delivery to %s failed: %s", request.webhook_url, message)
            self._log(request.webhook_url, AuditEventType.WEBHOOK_FAILURE, "failure", {
                "reason": message,
            })
            raise WebhookDeliveryError(message) from exc

        if resp.is_success:
            result = WebhookResult(
                success=True, status=resp.status_code, response_body=resp.text,
            )
        else:
            logger.info(
                "Webhook destination %s answered %d", request.webhook_url, resp.status_code,
            )
            result = WebhookResult(
                success=False,
                status=resp.status_code,
                response_body=resp.text,
                error=f"Webhook target returned {resp.status_code}: {resp.text}",
            )

        self._log(
            request.webhook_url,
            AuditEventType.WEBHOOK_RELAY,
            "success" if result.success else "rejected",
            {"destination_status": result.status},
        )
        return result

    def _log(
        self,
        url: str,
        event_type: AuditEventType,
        result: str,
        details: dict[str, object],
    ) -> None:
        if not self._audit:
            return
        self._audit.log(AuditEvent(
            event_type=event_type,
            target_url=url,
            action="relay",
            result=result,
            risk_level=RiskLevel.INFO if result == "success" else RiskLevel.LOW,
            details=details,
        ))
