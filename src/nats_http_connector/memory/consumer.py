"""InMemoryConsumer: IMessageConsumer with synchronous dispatch."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..ports import IMessageConsumer

if TYPE_CHECKING:
    from ..ports import MessageHandler
    from .bus import InMemoryMessageBus


class InMemoryConsumer(IMessageConsumer):
    """In-memory consumer that registers handlers on a shared bus.

    Use the same InMemoryMessageBus as InMemoryPublisher so that publish()
    runs handlers inline, one message at a time.
    """

    concurrency = 1

    def __init__(self, bus: InMemoryMessageBus) -> None:
        self._bus = bus
        self._subscriptions: list[tuple[str, MessageHandler]] = []

    async def subscribe(self, topic: str, handler: MessageHandler) -> None:
        self._bus.register(topic, handler)
        self._subscriptions.append((topic, handler))

    async def drain(self) -> None:
        """Unregister every handler; delivery is inline so nothing is pending."""
        for topic, handler in self._subscriptions:
            self._bus.unregister(topic, handler)
        self._subscriptions.clear()
