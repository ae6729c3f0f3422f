"""RequestForwarder: turns a bus message into an HTTP request."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from .exceptions import ForwardingError
from .messages import Failure, Success

if TYPE_CHECKING:
    from .config import ConnectorConfig
    from .messages import ForwardOutcome, InboundMessage

logger = logging.getLogger(__name__)


class RequestForwarder:
    """
    Sends each message payload, unmodified, to the configured HTTP endpoint.

    The response status is passed through: a 4xx or 5xx answer whose body was
    read in full is still a ``Success``. Only transport failures (connection
    refused, DNS, timeout) and body-read failures produce a ``Failure``.

    One ``httpx.AsyncClient`` is shared by every message; it is safe for
    concurrent use from multiple handler tasks.
    """

    def __init__(
        self,
        config: ConnectorConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            config: Validated connector metadata.
            client: Optional pre-built client (e.g. with a mock transport).
                When omitted, one is created with ``config.http_timeout`` and
                closed by :meth:`aclose`.
        """
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.http_timeout)

    def build_request(self, message: InboundMessage) -> httpx.Request:
        """Build the outbound request: fixed method and URL, config headers."""
        return self._client.build_request(
            self.config.http_method,
            self.config.http_endpoint,
            headers=self.config.headers(),
            content=message.payload,
        )

    async def forward(self, message: InboundMessage) -> ForwardOutcome:
        """Dispatch *message* and wait for the full response body."""
        request = self.build_request(message)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.warning(
                "HTTP request to %s failed: %s", self.config.http_endpoint, e
            )
            return Failure(self._wrap(e))

        try:
            body = await response.aread()
        except httpx.HTTPError as e:
            logger.warning(
                "Reading response body from %s failed: %s",
                self.config.http_endpoint,
                e,
            )
            return Failure(self._wrap(e))
        finally:
            await response.aclose()

        logger.debug(
            "Endpoint %s answered %d (%d bytes)",
            self.config.http_endpoint,
            response.status_code,
            len(body),
        )
        return Success(body=body, status_code=response.status_code)

    def _wrap(self, error: httpx.HTTPError) -> ForwardingError:
        wrapped = ForwardingError(
            str(error) or type(error).__name__,
            endpoint=self.config.http_endpoint,
        )
        wrapped.__cause__ = error
        return wrapped

    async def aclose(self) -> None:
        """Close the HTTP client if this forwarder created it."""
        if self._owns_client:
            await self._client.aclose()
