"""Integration tests for the POST /webhook endpoints."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from markup.proxy.app import create_app
from markup.webhook.relay import WebhookRelay

HOOK = "https://hooks.example.com/T000/B000"


async def _post(app: object, path: str, **kwargs: Any) -> httpx.Response:
    transport = ASGITransport(app=app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(path, **kwargs)


def _app(mock_transport, respond) -> object:
    return create_app(relay=WebhookRelay(transport=mock_transport(respond)))


class TestRelayEndpoint:
    @pytest.mark.asyncio
    async def test_destination_200(self, mock_transport, recorded_requests) -> None:
        app = _app(mock_transport, httpx.Response(200, text="ok"))
        resp = await _post(app, "/webhook", json={
            "webhookUrl": HOOK, "payload": {"event": "new_comment"},
        })

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "status": 200, "response": "ok"}
        assert str(recorded_requests[0].url) == HOOK
        assert json.loads(recorded_requests[0].content) == {"event": "new_comment"}

    @pytest.mark.asyncio
    async def test_destination_500_is_502(self, mock_transport) -> None:
        app = _app(mock_transport, httpx.Response(500, text="oops"))
        resp = await _post(app, "/webhook", json={"webhookUrl": HOOK, "payload": {"a": 1}})

        assert resp.status_code == 502
        body = resp.json()
        assert body["success"] is False
        assert body["status"] == 500
        assert "500" in body["error"]
        assert "oops" in body["error"]

    @pytest.mark.asyncio
    async def test_unreachable_destination_is_500(self, mock_transport) -> None:
        app = _app(mock_transport, httpx.ConnectError("connection refused"))
        resp = await _post(app, "/webhook", json={"webhookUrl": HOOK, "payload": {"a": 1}})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Failed to send webhook", "details": "connection refused",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"payload": {"a": 1}},
        {"webhookUrl": HOOK},
        {"webhookUrl": None, "payload": {"a": 1}},
        {},
    ])
    async def test_missing_fields_are_400(
        self, mock_transport, recorded_requests, body: dict[str, Any],
    ) -> None:
        app = _app(mock_transport, httpx.Response(200))
        resp = await _post(app, "/webhook", json=body)

        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing webhookUrl or payload"}
        assert recorded_requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [
        b'{"webhookUrl": "https://h.example.com", "payload": {"a": NaN}}',
        b'{"webhookUrl": "https://h.example.com", "payload": {"a": Infinity}}',
    ])
    async def test_non_finite_numbers_are_400(
        self, mock_transport, recorded_requests, raw: bytes,
    ) -> None:
        app = _app(mock_transport, httpx.Response(200))
        resp = await _post(
            app, "/webhook", content=raw, headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON body"}
        assert recorded_requests == []

    @pytest.mark.asyncio
    async def test_invalid_json_is_400(self, mock_transport) -> None:
        app = _app(mock_transport, httpx.Response(200))
        resp = await _post(
            app, "/webhook", content=b"{not json", headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON body"}

    @pytest.mark.asyncio
    async def test_invalid_webhook_url_is_400(self, mock_transport) -> None:
        app = _app(mock_transport, httpx.Response(200))
        resp = await _post(app, "/webhook", json={"webhookUrl": "http://", "payload": {}})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid webhookUrl"}

    @pytest.mark.asyncio
    async def test_non_object_payload_is_400(self, mock_transport) -> None:
        app = _app(mock_transport, httpx.Response(200))
        resp = await _post(app, "/webhook", json={"webhookUrl": HOOK, "payload": [1, 2]})
        assert resp.status_code == 400
        assert resp.json() == {"error": "payload must be a JSON object"}

    @pytest.mark.asyncio
    async def test_empty_payload_object_is_relayed(
        self, mock_transport, recorded_requests,
    ) -> None:
        app = _app(mock_transport, httpx.Response(200, text=""))
        resp = await _post(app, "/webhook", json={"webhookUrl": HOOK, "payload": {}})
        assert resp.status_code == 200
        assert json.loads(recorded_requests[0].content) == {}


class TestCommentEndpoints:
    @pytest.mark.asyncio
    async def test_comment_notification(self, mock_transport, recorded_requests) -> None:
        app = _app(mock_transport, httpx.Response(200, text="ok"))
        resp = await _post(app, "/webhook/comment", json={
            "webhookUrl": HOOK,
            "comment": {
                "id": "c-7",
                "text": "Button color is off",
                "pageUrl": "https://example.com",
                "x": 12.5,
                "y": 80,
                "priority": "low",
                "createdAt": "2026-02-01T10:00:00Z",
                "number": 7,
            },
        })

        assert resp.status_code == 200
        sent = json.loads(recorded_requests[0].content)
        assert sent["event"] == "new_comment"
        assert sent["data"]["comment_number"] == 7
        assert sent["data"]["position"] == {"x_percent": 12.5, "y_percent": 80.0}
        assert sent["data"]["assignee"] is None

    @pytest.mark.asyncio
    async def test_invalid_comment_is_400(self, mock_transport, recorded_requests) -> None:
        app = _app(mock_transport, httpx.Response(200))
        resp = await _post(app, "/webhook/comment", json={
            "webhookUrl": HOOK, "comment": {"id": "c-1", "x": 500},
        })
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid comment"
        assert recorded_requests == []

    @pytest.mark.asyncio
    async def test_comment_destination_rejects(self, mock_transport) -> None:
        app = _app(mock_transport, httpx.Response(410, text="gone"))
        resp = await _post(app, "/webhook/comment", json={
            "webhookUrl": HOOK,
            "comment": {
                "id": "c-1", "text": "t", "pageUrl": "https://example.com",
                "x": 1, "y": 1, "createdAt": "2026-02-01T10:00:00Z", "number": 1,
            },
        })
        assert resp.status_code == 502
        assert resp.json()["status"] == 410

    @pytest.mark.asyncio
    async def test_test_event(self, mock_transport, recorded_requests) -> None:
        app = _app(mock_transport, httpx.Response(200, text="received"))
        resp = await _post(app, "/webhook/test", json={"webhookUrl": HOOK})

        assert resp.status_code == 200
        assert resp.json()["response"] == "received"
        assert json.loads(recorded_requests[0].content)["event"] == "test"

    @pytest.mark.asyncio
    async def test_test_event_requires_url(self, mock_transport) -> None:
        app = _app(mock_transport, httpx.Response(200))
        resp = await _post(app, "/webhook/test", json={})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing webhookUrl"}
