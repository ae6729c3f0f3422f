"""InMemoryPublisher: IMessagePublisher with assertion helpers for tests."""

from __future__ import annotations

from ..ports import IMessagePublisher
from .bus import InMemoryMessageBus


class InMemoryPublisher(IMessagePublisher):
    """In-memory publisher that records payloads and optionally dispatches.

    Pass a shared InMemoryMessageBus to connect with InMemoryConsumer so that
    publish() triggers subscribed handlers.
    """

    def __init__(self, bus: InMemoryMessageBus | None = None) -> None:
        """If bus is None, a new bus is created (no consumer connection)."""
        self._bus = bus or InMemoryMessageBus()

    async def publish(self, topic: str, payload: bytes) -> None:
        await self._bus.publish(topic, payload)

    def get_published(self, topic: str | None = None) -> list[tuple[str, bytes]]:
        return self._bus.get_published(topic)

    def assert_published(self, topic: str, count: int = 1) -> None:
        """Assert that exactly `count` payloads were published to *topic*.

        Raises AssertionError if not met.
        """
        matching = self.get_published(topic)
        assert len(matching) == count, (
            f"Expected {count} message(s) on {topic!r}, got {len(matching)}. "
            f"Published: {[t for t, _ in self.get_published()]}"
        )

    @property
    def bus(self) -> InMemoryMessageBus:
        """Return the bus (e.g. to pass to InMemoryConsumer)."""
        return self._bus
