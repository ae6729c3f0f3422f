"""Process entry point: ``python -m nats_http_connector``.

Reads bus settings and connector metadata from the environment, connects to
NATS and runs the bridge until SIGINT or SIGTERM. Every startup failure is
fatal and exits with status 1 before any message is consumed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
import sys

from .bridge import Bridge
from .config import BusSettings, ConnectorConfig
from .exceptions import ConfigurationError, MessagingError
from .forwarder import RequestForwarder
from .log_config import configure_logging
from .middleware import LoggingMiddleware
from .nats import NatsConnectionManager, NatsConsumer, NatsPublisher
from .router import ResultRouter

logger = logging.getLogger("nats_http_connector")


def load_settings() -> tuple[BusSettings, ConnectorConfig]:
    """Validate the environment; raises ConfigurationError."""
    config = ConnectorConfig.from_env()
    settings = BusSettings.from_env()
    return settings, config


async def serve(
    settings: BusSettings,
    config: ConnectorConfig,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Connect, subscribe and run until *stop_event* is set."""
    connection = NatsConnectionManager(settings.host)
    await connection.connect()
    try:
        bridge = Bridge(
            NatsConsumer(
                connection,
                concurrency=settings.concurrency,
                queue=settings.queue_group,
            ),
            RequestForwarder(config),
            ResultRouter(NatsPublisher(connection), config),
            middlewares=[LoggingMiddleware()],
            drain_timeout=settings.drain_timeout,
        )
        stop = stop_event or asyncio.Event()
        _install_signal_handlers(stop)
        await bridge.run(stop)
    finally:
        try:
            await connection.drain()
        except MessagingError:
            logger.exception("Closing NATS connection failed")
        await connection.close()


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)


def main() -> None:
    configure_logging(
        os.environ.get("LOG_LEVEL", "INFO"),
        json_output=os.environ.get("LOG_FORMAT", "json") != "text",
    )
    try:
        settings, config = load_settings()
    except ConfigurationError as e:
        logger.critical("invalid configuration: %s", e.errors)
        sys.exit(1)

    try:
        asyncio.run(serve(settings, config))
    except MessagingError as e:
        logger.critical("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
