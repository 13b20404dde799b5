"""Shared test fixtures for markup."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from markup.audit.logger import AuditLogger
from markup.models import AuditEvent, AuditEventType, RiskLevel
from markup.webhook.models import Comment


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def mock_transport(
    recorded_requests: list[httpx.Request],
) -> Callable[..., httpx.MockTransport]:
    """Build an httpx.MockTransport that records every request it serves.

    ``respond`` is either a fixed httpx.Response or a callable taking the
    request; an exception instance is raised instead of answering.
    """

    def _build(respond: httpx.Response | Exception | Callable[[httpx.Request], Any]):
        def handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            if isinstance(respond, Exception):
                raise respond
            if isinstance(respond, httpx.Response):
                return respond
            return respond(request)

        return httpx.MockTransport(handler)

    return _build


# --- Factories for test data ---


@pytest.fixture
def make_audit_event() -> Callable[..., AuditEvent]:
    """Factory for AuditEvent with sensible defaults."""

    def _make(**kwargs: Any) -> AuditEvent:
        defaults: dict[str, Any] = {
            "event_type": AuditEventType.PROXY_FETCH,
            "target_url": "https://example.com",
            "action": "fetch",
            "result": "success",
            "risk_level": RiskLevel.INFO,
        }
        defaults.update(kwargs)
        return AuditEvent(**defaults)

    return _make


@pytest.fixture
def make_comment() -> Callable[..., Comment]:
    """Factory for Comment with sensible defaults."""

    def _make(**kwargs: Any) -> Comment:
        defaults: dict[str, Any] = {
            "id": "c-1",
            "text": "Logo is misaligned",
            "page_url": "https://example.com/pricing",
            "x": 42.5,
            "y": 10.0,
            "assignee": "dana@example.com",
            "priority": "high",
            "created_at": "2026-01-01T00:00:00Z",
            "number": 3,
        }
        defaults.update(kwargs)
        return Comment(**defaults)

    return _make
