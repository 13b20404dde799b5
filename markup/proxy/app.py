"""FastAPI application: page proxy and webhook relay endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from markup.audit.logger import AuditLogger
from markup.config import Settings
from markup.errors import (
    ConfigurationError,
    InvalidInput,
    UpstreamFetchError,
    UpstreamHttpError,
)
from markup.models import AuditEvent, AuditEventType, RiskLevel
from markup.proxy.error_page import render_error
from markup.proxy.fetcher import UpstreamFetcher
from markup.proxy.rewriter import rewrite
from markup.proxy.urls import normalize_url
from markup.webhook.models import Comment, NotificationOutcome, WebhookRequest, loads_json
from markup.webhook.notifier import CommentNotifier
from markup.webhook.relay import WebhookRelay

logger = logging.getLogger(__name__)

# Sent with every proxied page. Upstream headers are never forwarded, so an
# upstream Content-Security-Policy or X-Frame-Options cannot reach the frame.
# CORS headers come from CORSMiddleware and MARKUP_CORS_ORIGINS.
FRAME_HEADERS = {
    "X-Frame-Options": "ALLOWALL",
    "Cache-Control": "no-store",
}


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    return create_app(Settings.from_env())


def create_app(
    settings: Settings | None = None,
    fetcher: UpstreamFetcher | None = None,
    relay: WebhookRelay | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the proxy app. Collaborators default to ones built from settings."""
    settings = settings or Settings()
    if audit_logger is None:
        audit_logger = AuditLogger.from_settings(settings)
    fetcher = fetcher or UpstreamFetcher(timeout=settings.fetch_timeout)
    relay = relay or WebhookRelay(timeout=settings.webhook_timeout, audit_logger=audit_logger)
    notifier = CommentNotifier(relay)

    app = FastAPI(title="markup", docs_url=None, redoc_url=None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    def audit(request: Request, **fields: Any) -> None:
        if audit_logger:
            audit_logger.log(AuditEvent(
                source_ip=request.client.host if request.client else None,
                **fields,
            ))

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse({"error": "Server misconfigured"}, status_code=500)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/proxy")
    async def proxy(request: Request, url: str | None = None) -> Response:
        if url is None or not url.strip():
            return JSONResponse({"error": 'Missing "url" query parameter'}, status_code=400)
        try:
            target = normalize_url(url)
        except InvalidInput as exc:
            audit(
                request,
                event_type=AuditEventType.INVALID_INPUT,
                target_url=url,
                action="proxy",
                result="rejected",
                details={"reason": str(exc)},
            )
            return JSONResponse({"error": "Invalid URL"}, status_code=400)

        try:
            upstream = await fetcher.fetch(target)
            upstream.raise_for_status()
        except UpstreamFetchError as exc:
            audit(
                request,
                event_type=AuditEventType.PROXY_ERROR,
                target_url=target,
                action="fetch",
                result="failure",
                risk_level=RiskLevel.LOW,
                details={"reason": str(exc)},
            )
            return _frame_html(render_error(target, 0, str(exc)))
        except UpstreamHttpError as exc:
            logger.info("Upstream %s answered %d", target, exc.status_code)
            audit(
                request,
                event_type=AuditEventType.PROXY_ERROR,
                target_url=target,
                action="fetch",
                result="failure",
                risk_level=RiskLevel.LOW,
                details={"upstream_status": exc.status_code},
            )
            return _frame_html(render_error(target, exc.status_code, exc.status_text))

        audit(
            request,
            event_type=AuditEventType.PROXY_FETCH,
            target_url=target,
            action="fetch",
            result="success",
            details={"upstream_status": upstream.status_code, "final_url": upstream.url},
        )
        return _frame_html(rewrite(upstream.body, target))

    @app.post("/webhook")
    async def webhook(request: Request) -> JSONResponse:
        body = await _json_object(request)
        if isinstance(body, JSONResponse):
            return body
        if body.get("webhookUrl") is None or body.get("payload") is None:
            return JSONResponse({"error": "Missing webhookUrl or payload"}, status_code=400)
        if not isinstance(body["payload"], dict):
            return JSONResponse({"error": "payload must be a JSON object"}, status_code=400)
        webhook_url = _webhook_url(body["webhookUrl"])
        if webhook_url is None:
            return JSONResponse({"error": "Invalid webhookUrl"}, status_code=400)

        notification = await notifier.deliver(
            WebhookRequest(webhook_url=webhook_url, payload=body["payload"]),
        )
        return _notification_response(notification)

    @app.post("/webhook/test")
    async def webhook_test(request: Request) -> JSONResponse:
        body = await _json_object(request)
        if isinstance(body, JSONResponse):
            return body
        if body.get("webhookUrl") is None:
            return JSONResponse({"error": "Missing webhookUrl"}, status_code=400)
        webhook_url = _webhook_url(body["webhookUrl"])
        if webhook_url is None:
            return JSONResponse({"error": "Invalid webhookUrl"}, status_code=400)
        return _notification_response(await notifier.send_test(webhook_url))

    @app.post("/webhook/comment")
    async def webhook_comment(request: Request) -> JSONResponse:
        body = await _json_object(request)
        if isinstance(body, JSONResponse):
            return body
        if body.get("webhookUrl") is None or body.get("comment") is None:
            return JSONResponse({"error": "Missing webhookUrl or comment"}, status_code=400)
        webhook_url = _webhook_url(body["webhookUrl"])
        if webhook_url is None:
            return JSONResponse({"error": "Invalid webhookUrl"}, status_code=400)
        try:
            comment = Comment.model_validate(body["comment"])
        except ValidationError as exc:
            return JSONResponse(
                {"error": "Invalid comment", "details": str(exc)}, status_code=400,
            )
        return _notification_response(await notifier.notify_new_comment(webhook_url, comment))

    return app


def _frame_html(document: str) -> HTMLResponse:
    return HTMLResponse(
        content=document,
        status_code=200,
        headers=FRAME_HEADERS,
    )


async def _json_object(request: Request) -> dict[str, Any] | JSONResponse:
    raw = await request.body()
    try:
        body = loads_json(raw)
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    if not isinstance(body, dict):
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
    return body


def _webhook_url(raw: object) -> str | None:
    if not isinstance(raw, str):
        return None
    try:
        return normalize_url(raw)
    except InvalidInput:
        return None


def _notification_response(outcome: NotificationOutcome) -> JSONResponse:
    if outcome.result is None:
        return JSONResponse(
            {"error": "Failed to send webhook", "details": outcome.error},
            status_code=500,
        )
    content, status_code = outcome.result.to_response()
    return JSONResponse(content, status_code=status_code)
