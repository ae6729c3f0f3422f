"""In-memory message bus: connects publisher and consumer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import PublishError, SubscriptionError
from ..messages import InboundMessage

if TYPE_CHECKING:
    from ..ports import MessageHandler


class InMemoryMessageBus:
    """Shared bus: publish records the payload and
    synchronously invokes handlers registered for the topic.

    ``fail_publish_on`` and ``fail_subscribe_on`` hold topics for which the
    bus refuses the operation, to exercise error paths in tests.
    """

    def __init__(self) -> None:
        self._messages: list[tuple[str, bytes]] = []
        self._handlers: dict[str, list[MessageHandler]] = {}
        self.fail_publish_on: set[str] = set()
        self.fail_subscribe_on: set[str] = set()

    def register(self, topic: str, handler: MessageHandler) -> None:
        """Register a handler for the topic."""
        if not topic or topic in self.fail_subscribe_on:
            raise SubscriptionError(f"subscription to {topic!r} rejected", topic=topic)
        self._handlers.setdefault(topic, []).append(handler)

    def unregister(self, topic: str, handler: MessageHandler) -> None:
        handlers = self._handlers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, topic: str, payload: bytes) -> None:
        """Record the payload and invoke all handlers for the topic."""
        if topic in self.fail_publish_on:
            raise PublishError(f"publish to {topic!r} rejected", topic=topic)
        self._messages.append((topic, payload))
        for h in list(self._handlers.get(topic, [])):
            await h(InboundMessage(topic=topic, payload=payload))

    def get_published(self, topic: str | None = None) -> list[tuple[str, bytes]]:
        """Return published (topic, payload) pairs in order."""
        if topic is None:
            return list(self._messages)
        return [(t, p) for t, p in self._messages if t == topic]

    def clear(self) -> None:
        """Clear published messages and handlers (for test teardown)."""
        self._messages.clear()
        self._handlers.clear()
