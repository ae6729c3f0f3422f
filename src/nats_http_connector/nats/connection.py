"""NATS connection, drain and health check."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import nats
from nats.errors import Error as NatsError

from ..exceptions import MessagingConnectionError

if TYPE_CHECKING:
    from nats.aio.client import Client

logger = logging.getLogger(__name__)


class NatsConnectionManager:
    """Holds the single NATS connection shared by publisher and consumer.

    nats-py reconnects on its own; the manager only logs the transitions.
    Call connect() before use, close() on shutdown, health_check() for probes.
    """

    def __init__(self, servers: str | list[str], **connect_kwargs: Any) -> None:
        """Configure server URL(s) and optional ``nats.connect`` kwargs."""
        self._servers = servers
        self._connect_kwargs = connect_kwargs
        self._client: Client | None = None

    async def connect(self) -> None:
        """Open the connection. Idempotent if already connected."""
        if self._client is not None and not self._client.is_closed:
            return
        options: dict[str, Any] = {
            "error_cb": self._on_error,
            "disconnected_cb": self._on_disconnected,
            "reconnected_cb": self._on_reconnected,
            **self._connect_kwargs,
        }
        try:
            self._client = await nats.connect(self._servers, **options)
        except (NatsError, OSError, ValueError, asyncio.TimeoutError) as e:
            raise MessagingConnectionError(
                f"failed to establish connection with NATS: {e}"
            ) from e
        logger.info("Connected to NATS at %s", self._client.connected_url)

    async def drain(self) -> None:
        """Drain every subscription, flush pending publishes and close."""
        if self._client is None or self._client.is_closed:
            return
        try:
            await self._client.drain()
        except (NatsError, asyncio.TimeoutError) as e:
            raise MessagingConnectionError(f"failed to drain NATS connection: {e}") from e

    async def close(self) -> None:
        if self._client is not None:
            if not self._client.is_closed:
                await self._client.close()
            self._client = None

    @property
    def client(self) -> Client:
        """Return the client; raises if not connected."""
        if self._client is None:
            raise MessagingConnectionError("Not connected; call connect() first")
        return self._client

    async def health_check(self) -> bool:
        """Return True if the connection is open and not reconnecting."""
        return self._client is not None and self._client.is_connected

    async def _on_error(self, e: Exception) -> None:
        logger.error("NATS connection error: %s", e)

    async def _on_disconnected(self) -> None:
        logger.warning("Disconnected from NATS")

    async def _on_reconnected(self) -> None:
        url = self._client.connected_url if self._client is not None else None
        logger.info("Reconnected to NATS at %s", url)
