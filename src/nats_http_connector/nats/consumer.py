"""NatsConsumer: IMessageConsumer over core NATS subscriptions."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from nats.errors import Error as NatsError

from ..exceptions import MessagingError, SubscriptionError
from ..messages import InboundMessage
from ..ports import IMessageConsumer

if TYPE_CHECKING:
    from nats.aio.msg import Msg
    from nats.aio.subscription import Subscription

    from ..ports import MessageHandler
    from .connection import NatsConnectionManager

logger = logging.getLogger(__name__)


class NatsConsumer(IMessageConsumer):
    """NATS adapter implementing IMessageConsumer.

    nats-py delivers the messages of one subscription one at a time. With
    ``concurrency > 1`` each message is handed to its own task, and the
    subscription waits for a free slot before taking the next one.
    """

    def __init__(
        self,
        connection: NatsConnectionManager,
        *,
        concurrency: int = 1,
        queue: str = "",
    ) -> None:
        """Configure consumer.

        Args:
            connection: Shared, already connected connection manager.
            concurrency: Maximum handler invocations running at once.
            queue: Optional NATS queue group, to share a topic between replicas.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._connection = connection
        self.concurrency = concurrency
        self._queue = queue
        self._slots = asyncio.Semaphore(concurrency)
        self._subscriptions: list[Subscription] = []
        self._tasks: set[asyncio.Task[None]] = set()

    async def subscribe(self, topic: str, handler: MessageHandler) -> None:
        """Subscribe *handler* to *topic*; failures raise SubscriptionError."""

        async def on_message(msg: Msg) -> None:
            message = InboundMessage(
                topic=msg.subject,
                payload=msg.data,
                headers=dict(msg.headers or {}),
            )
            if self.concurrency == 1:
                await self._invoke(handler, message)
                return
            await self._slots.acquire()
            task = asyncio.create_task(self._run_in_slot(handler, message))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        try:
            sub = await self._connection.client.subscribe(
                topic, queue=self._queue, cb=on_message
            )
        except (NatsError, MessagingError) as e:
            raise SubscriptionError(
                f"error occurred while subscribing to {topic!r}: {e}", topic=topic
            ) from e
        self._subscriptions.append(sub)

    async def drain(self) -> None:
        """Drain subscriptions, then wait for handler tasks still running."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for sub in subscriptions:
            try:
                await sub.drain()
            except NatsError as e:
                raise MessagingError(f"failed to drain subscription: {e}") from e
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def health_check(self) -> bool:
        return await self._connection.health_check()

    async def _run_in_slot(self, handler: MessageHandler, message: InboundMessage) -> None:
        try:
            await self._invoke(handler, message)
        finally:
            self._slots.release()

    @staticmethod
    async def _invoke(handler: MessageHandler, message: InboundMessage) -> None:
        try:
            await handler(message)
        except Exception:
            logger.exception("Handler failed for message on %s", message.topic)
