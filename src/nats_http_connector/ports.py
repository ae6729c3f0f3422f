"""Ports for the message bus and the handler middleware chain.

Transport packages (``nats``, ``memory``) provide concrete adapters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .messages import InboundMessage

    MessageHandler = Callable[[InboundMessage], Awaitable[Any]]


@runtime_checkable
class IMessagePublisher(Protocol):
    """
    Port for publishing raw payloads to a topic.

    Implementations must tolerate concurrent ``publish`` calls from
    independent message handlers sharing one connection.
    """

    async def publish(self, topic: str, payload: bytes) -> None:
        """
        Publish *payload* to *topic* exactly once.

        Raises:
            PublishError: The bus did not accept the payload.
        """
        ...


@runtime_checkable
class IMessageConsumer(Protocol):
    """
    Port for subscribing a handler to a topic.

    Concurrency contract: the consumer invokes the handler on at most
    ``concurrency`` execution contexts at once. With ``concurrency == 1``
    messages are handled one after another in delivery order; above that no
    ordering across messages is guaranteed.
    """

    concurrency: int

    async def subscribe(self, topic: str, handler: MessageHandler) -> None:
        """
        Register *handler* for every message delivered on *topic*.

        Raises:
            SubscriptionError: The bus rejected the subscription.
        """
        ...

    async def drain(self) -> None:
        """Stop delivering new messages and wait for running handlers."""
        ...


@runtime_checkable
class IMiddleware(Protocol):
    """Wraps per-message handling; the chain is applied outermost first."""

    async def __call__(
        self,
        message: InboundMessage,
        next_handler: Callable[[InboundMessage], Awaitable[Any]],
    ) -> Any: ...
