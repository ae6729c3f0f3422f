"""Handler middleware: wraps the forward-then-route step for each message."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .ports import IMiddleware

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from .messages import InboundMessage

_log = logging.getLogger("nats_http_connector.messages")


class LoggingMiddleware(IMiddleware):
    """Emits one JSON log entry per message: topic, size, outcome, duration.

    ``latency_ms`` is measured from ``received_at``, so it also covers the
    time a message waited for a free handler slot.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or _log

    async def __call__(
        self,
        message: InboundMessage,
        next_handler: Callable[[InboundMessage], Awaitable[Any]],
    ) -> Any:
        start = time.monotonic()
        outcome = "error"
        try:
            result = await next_handler(message)
            outcome = getattr(result, "value", str(result))
            return result
        finally:
            try:
                entry = {
                    "topic": message.topic,
                    "payload_bytes": len(message.payload),
                    "outcome": outcome,
                    "duration_ms": round((time.monotonic() - start) * 1000, 2),
                    "latency_ms": round(
                        (datetime.now(timezone.utc) - message.received_at)
                        .total_seconds()
                        * 1000,
                        2,
                    ),
                }
                self._log.info(json.dumps(entry))
            except Exception:  # noqa: BLE001
                _log.debug("Failed to emit structured log entry", exc_info=True)


def build_pipeline(
    middlewares: Sequence[IMiddleware],
    handler_fn: Callable[[InboundMessage], Awaitable[Any]],
) -> Callable[[InboundMessage], Awaitable[Any]]:
    """Build a middleware chain ending at *handler_fn*.

    The first middleware in the list is the **outermost** wrapper.
    """
    pipeline = handler_fn

    for mw in reversed(middlewares):
        current_next = pipeline

        async def _wrapper(
            message: InboundMessage,
            _mw: IMiddleware = mw,
            _next: Callable[[InboundMessage], Awaitable[Any]] = current_next,
        ) -> Any:
            return await _mw(message, _next)

        pipeline = _wrapper

    return pipeline
