"""Tests for ResultRouter."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

from nats_http_connector.exceptions import ForwardingError, PublishError
from nats_http_connector.messages import Failure, Success
from nats_http_connector.router import ResultRouter, RouteResult

if TYPE_CHECKING:
    from nats_http_connector.config import ConnectorConfig
    from nats_http_connector.memory import InMemoryPublisher


@pytest.mark.asyncio
async def test_success_published_to_response_topic(
    config: ConnectorConfig, publisher: InMemoryPublisher
) -> None:
    router = ResultRouter(publisher, config)
    result = await router.route(Success(body=b"ack", status_code=200))

    assert result is RouteResult.PUBLISHED_RESPONSE
    assert publisher.get_published() == [("acks", b"ack")]


@pytest.mark.asyncio
async def test_success_body_published_unmodified(
    config: ConnectorConfig, publisher: InMemoryPublisher
) -> None:
    body = b"\x00\xff binary \r\n"
    await ResultRouter(publisher, config).route(Success(body=body, status_code=500))
    assert publisher.get_published() == [("acks", body)]


@pytest.mark.asyncio
async def test_success_dropped_without_response_topic(
    config: ConnectorConfig, publisher: InMemoryPublisher
) -> None:
    cfg = config.model_copy(update={"response_topic": ""})
    result = await ResultRouter(publisher, cfg).route(Success(body=b"ack"))

    assert result is RouteResult.DROPPED
    assert publisher.get_published() == []


@pytest.mark.asyncio
async def test_failure_published_to_error_topic(
    config: ConnectorConfig, publisher: InMemoryPublisher
) -> None:
    outcome = Failure(ForwardingError("connection refused"))
    result = await ResultRouter(publisher, config).route(outcome)

    assert result is RouteResult.PUBLISHED_ERROR
    assert publisher.get_published() == [("errs", b"connection refused")]


@pytest.mark.asyncio
async def test_failed_success_publish_not_rerouted_to_error_topic(
    config: ConnectorConfig,
    publisher: InMemoryPublisher,
    caplog: pytest.LogCaptureFixture,
) -> None:
    publisher.bus.fail_publish_on.add("acks")
    result = await ResultRouter(publisher, config).route(Success(body=b"ack"))

    assert result is RouteResult.PUBLISH_FAILED
    assert publisher.get_published() == []
    assert "failed to publish response body" in caplog.text


@pytest.mark.asyncio
async def test_failed_error_publish_is_only_logged(
    config: ConnectorConfig,
    publisher: InMemoryPublisher,
    caplog: pytest.LogCaptureFixture,
) -> None:
    publisher.bus.fail_publish_on.add("errs")
    result = await ResultRouter(publisher, config).route(
        Failure(ForwardingError("boom"))
    )

    assert result is RouteResult.PUBLISH_FAILED
    assert publisher.get_published() == []
    assert "failed to publish message to error topic" in caplog.text


@pytest.mark.asyncio
async def test_each_publish_attempted_once(config: ConnectorConfig) -> None:
    pub = AsyncMock()
    pub.publish.side_effect = PublishError("nope", topic="acks")
    await ResultRouter(pub, config).route(Success(body=b"ack"))
    pub.publish.assert_awaited_once_with("acks", b"ack")

    pub.publish.reset_mock()
    await ResultRouter(pub, config).route(Failure(ForwardingError("x")))
    pub.publish.assert_awaited_once_with("errs", b"x")
