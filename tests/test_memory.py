"""Tests for InMemoryPublisher and InMemoryConsumer."""

from __future__ import annotations

import pytest

from nats_http_connector.exceptions import PublishError, SubscriptionError
from nats_http_connector.memory import InMemoryConsumer, InMemoryPublisher
from nats_http_connector.messages import InboundMessage
from nats_http_connector.ports import IMessageConsumer, IMessagePublisher


@pytest.mark.asyncio
async def test_publish_get_published() -> None:
    pub = InMemoryPublisher()
    await pub.publish("acks", b"one")
    await pub.publish("errs", b"two")
    assert pub.get_published() == [("acks", b"one"), ("errs", b"two")]
    assert pub.get_published("errs") == [("errs", b"two")]


@pytest.mark.asyncio
async def test_assert_published() -> None:
    pub = InMemoryPublisher()
    await pub.publish("acks", b"one")
    pub.assert_published("acks", count=1)
    with pytest.raises(AssertionError):
        pub.assert_published("acks", count=2)
    with pytest.raises(AssertionError):
        pub.assert_published("errs")


@pytest.mark.asyncio
async def test_consumer_receives_on_publish() -> None:
    pub = InMemoryPublisher()
    consumer = InMemoryConsumer(pub.bus)
    received: list[InboundMessage] = []

    async def handler(message: InboundMessage) -> None:
        received.append(message)

    await consumer.subscribe("events", handler)
    await pub.publish("events", b"hello")
    assert len(received) == 1
    assert received[0].topic == "events"
    assert received[0].payload == b"hello"


@pytest.mark.asyncio
async def test_drain_unregisters_handlers() -> None:
    pub = InMemoryPublisher()
    consumer = InMemoryConsumer(pub.bus)
    received: list[InboundMessage] = []

    async def handler(message: InboundMessage) -> None:
        received.append(message)

    await consumer.subscribe("events", handler)
    await consumer.drain()
    await pub.publish("events", b"hello")
    assert received == []


@pytest.mark.asyncio
async def test_failure_injection() -> None:
    pub = InMemoryPublisher()
    consumer = InMemoryConsumer(pub.bus)
    pub.bus.fail_publish_on.add("errs")
    pub.bus.fail_subscribe_on.add("events")

    with pytest.raises(PublishError) as exc_info:
        await pub.publish("errs", b"x")
    assert exc_info.value.topic == "errs"

    async def handler(message: InboundMessage) -> None:  # noqa: ARG001
        return None

    with pytest.raises(SubscriptionError):
        await consumer.subscribe("events", handler)
    with pytest.raises(SubscriptionError):
        await consumer.subscribe("", handler)


@pytest.mark.asyncio
async def test_clear() -> None:
    pub = InMemoryPublisher()
    await pub.publish("acks", b"x")
    pub.bus.clear()
    assert pub.get_published() == []


def test_protocol_compliance() -> None:
    pub = InMemoryPublisher()
    consumer = InMemoryConsumer(pub.bus)
    assert isinstance(pub, IMessagePublisher)
    assert isinstance(consumer, IMessageConsumer)
    assert consumer.concurrency == 1
