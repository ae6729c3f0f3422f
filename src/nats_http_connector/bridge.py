"""Bridge: subscribes to a topic and forwards every message over HTTP.

Lifecycle::

    IDLE --start()--> SUBSCRIBED --run()--> RUNNING --stop()--> STOPPING --> STOPPED

Per message the steps are strictly sequential (forward, then route). Across
messages nothing is ordered or shared except the read-only config, the HTTP
client and the bus connection; the consumer decides how many messages are in
flight at once.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import MessagingError
from .middleware import build_pipeline
from .router import RouteResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .forwarder import RequestForwarder
    from .messages import InboundMessage
    from .ports import IMessageConsumer, IMiddleware
    from .router import ResultRouter

logger = logging.getLogger(__name__)


class BridgeState(Enum):
    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class BridgeMetrics:
    """Counters for the process lifetime; only touched from the event loop."""

    messages_received: int = 0
    messages_forwarded: int = 0
    forward_failures: int = 0
    publish_failures: int = 0


class Bridge:
    """Wires subscription, RequestForwarder and ResultRouter together.

    Usage::

        bridge = Bridge(consumer, RequestForwarder(config), ResultRouter(pub, config))
        await bridge.run(stop_event)
    """

    def __init__(
        self,
        consumer: IMessageConsumer,
        forwarder: RequestForwarder,
        router: ResultRouter,
        *,
        middlewares: Sequence[IMiddleware] = (),
        drain_timeout: float = 30.0,
    ) -> None:
        self.config = forwarder.config
        self.metrics = BridgeMetrics()
        self._consumer = consumer
        self._forwarder = forwarder
        self._router = router
        self._drain_timeout = drain_timeout
        self._pipeline = build_pipeline(list(middlewares), self._process)
        self._state = BridgeState.IDLE
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def state(self) -> BridgeState:
        return self._state

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def start(self) -> None:
        """Subscribe to ``config.topic``.

        A SubscriptionError propagates; the caller treats it as fatal.
        """
        if self._state is not BridgeState.IDLE:
            return
        await self._consumer.subscribe(self.config.topic, self.handle)
        self._state = BridgeState.SUBSCRIBED
        logger.info(
            "Subscribed to %s (source=%s, endpoint=%s, concurrency=%d)",
            self.config.topic,
            self.config.source_name,
            self.config.http_endpoint,
            self._consumer.concurrency,
        )

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Subscribe if needed, then park until *stop_event* is set.

        Without a stop event the bridge runs until the task is cancelled.
        Either way it drains in-flight messages before returning.
        """
        try:
            await self.start()
            self._state = BridgeState.RUNNING
            logger.info("NATS consumer up and running!...")
            if stop_event is None:
                await asyncio.Future()
            else:
                await stop_event.wait()
        finally:
            await self.stop(self._drain_timeout)

    async def stop(self, timeout: float | None = None) -> None:
        """Stop accepting messages, wait for in-flight ones, release the client.

        *timeout* bounds the consumer drain and the wait for in-flight
        handlers together.
        """
        if self._state in (BridgeState.STOPPING, BridgeState.STOPPED):
            return
        subscribed = self._state is not BridgeState.IDLE
        self._state = BridgeState.STOPPING
        logger.info("Bridge stopping (in_flight=%d)", self._in_flight)
        try:
            try:
                await asyncio.wait_for(self._drain(subscribed), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Shutdown with %d message(s) still in flight", self._in_flight
                )
        finally:
            await self._forwarder.aclose()
            self._state = BridgeState.STOPPED
            logger.info(
                "Bridge stopped (received=%d, forwarded=%d, failed=%d)",
                self.metrics.messages_received,
                self.metrics.messages_forwarded,
                self.metrics.forward_failures,
            )

    async def _drain(self, subscribed: bool) -> None:
        if subscribed:
            try:
                await self._consumer.drain()
            except MessagingError:
                logger.exception("Draining subscription on %s failed", self.config.topic)
        await self._idle.wait()

    async def handle(self, message: InboundMessage) -> RouteResult | None:
        """Forward then route one message. Never raises for per-message errors."""
        if self._state is BridgeState.STOPPED:
            logger.debug("Bridge stopped; ignoring message on %s", message.topic)
            return None
        self._in_flight += 1
        self._idle.clear()
        self.metrics.messages_received += 1
        try:
            return await self._pipeline(message)
        except Exception:
            logger.exception("Unexpected error while handling message on %s", message.topic)
            return None
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()

    async def _process(self, message: InboundMessage) -> RouteResult:
        logger.debug("Received %d bytes on %s", len(message.payload), message.topic)
        outcome = await self._forwarder.forward(message)
        if outcome.ok:
            self.metrics.messages_forwarded += 1
        else:
            self.metrics.forward_failures += 1
        result = await self._router.route(outcome)
        if result is RouteResult.PUBLISH_FAILED:
            self.metrics.publish_failures += 1
        return result
