"""Tests for LoggingMiddleware and build_pipeline."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from nats_http_connector.messages import InboundMessage
from nats_http_connector.middleware import LoggingMiddleware, build_pipeline
from nats_http_connector.router import RouteResult


@pytest.mark.asyncio
async def test_logs_outcome() -> None:
    log = MagicMock()
    mw = LoggingMiddleware(logger=log)
    next_handler = AsyncMock(return_value=RouteResult.PUBLISHED_RESPONSE)
    message = InboundMessage(topic="events", payload=b"hello")

    result = await mw(message, next_handler)

    assert result is RouteResult.PUBLISHED_RESPONSE
    entry = json.loads(log.info.call_args[0][0])
    assert entry["topic"] == "events"
    assert entry["payload_bytes"] == 5
    assert entry["outcome"] == "published_response"
    assert "duration_ms" in entry


@pytest.mark.asyncio
async def test_failure_does_not_swallow() -> None:
    log = MagicMock()
    mw = LoggingMiddleware(logger=log)
    next_handler = AsyncMock(side_effect=RuntimeError("x"))
    with pytest.raises(RuntimeError):
        await mw(InboundMessage(topic="events", payload=b""), next_handler)
    entry = json.loads(log.info.call_args[0][0])
    assert entry["outcome"] == "error"


@pytest.mark.asyncio
async def test_pipeline_order() -> None:
    calls: list[str] = []

    def tracer(name: str) -> Any:
        async def mw(message: InboundMessage, next_handler: Any) -> Any:
            calls.append(f"{name}:before")
            result = await next_handler(message)
            calls.append(f"{name}:after")
            return result

        return mw

    async def handler(message: InboundMessage) -> str:
        calls.append("handler")
        return "done"

    pipeline = build_pipeline([tracer("outer"), tracer("inner")], handler)
    result = await pipeline(InboundMessage(topic="events", payload=b""))

    assert result == "done"
    assert calls == [
        "outer:before",
        "inner:before",
        "handler",
        "inner:after",
        "outer:after",
    ]


@pytest.mark.asyncio
async def test_latency_counts_from_receipt() -> None:
    log = MagicMock()
    received = datetime.now(timezone.utc) - timedelta(seconds=2)
    message = InboundMessage(topic="events", payload=b"x", received_at=received)

    await LoggingMiddleware(logger=log)(
        message, AsyncMock(return_value=RouteResult.DROPPED)
    )

    entry = json.loads(log.info.call_args[0][0])
    assert entry["latency_ms"] >= 2000
    assert entry["duration_ms"] < entry["latency_ms"]
