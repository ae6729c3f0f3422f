"""NatsPublisher: IMessagePublisher over core NATS publish."""

from __future__ import annotations

from typing import TYPE_CHECKING

from nats.errors import Error as NatsError

from ..exceptions import MessagingError, PublishError
from ..ports import IMessagePublisher

if TYPE_CHECKING:
    from .connection import NatsConnectionManager


class NatsPublisher(IMessagePublisher):
    """NATS adapter implementing IMessagePublisher.

    Core NATS publish is fire-and-forget: a call succeeds once the payload is
    in the client's outbound buffer.
    """

    def __init__(self, connection: NatsConnectionManager) -> None:
        self._connection = connection

    async def publish(self, topic: str, payload: bytes) -> None:
        try:
            await self._connection.client.publish(topic, payload)
        except (NatsError, MessagingError) as e:
            raise PublishError(
                f"failed to publish to {topic!r}: {e}", topic=topic
            ) from e

    async def health_check(self) -> bool:
        return await self._connection.health_check()
