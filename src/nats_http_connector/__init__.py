"""NATS to HTTP bridge: forwards bus messages to an HTTP endpoint and
publishes the response (or the failure) back onto the bus."""

from __future__ import annotations

from .bridge import Bridge, BridgeMetrics, BridgeState
from .config import BusSettings, ConnectorConfig
from .exceptions import (
    ConfigurationError,
    ConnectorError,
    ForwardingError,
    InfrastructureError,
    MessagingConnectionError,
    MessagingError,
    PublishError,
    SubscriptionError,
)
from .forwarder import RequestForwarder
from .memory import InMemoryConsumer, InMemoryMessageBus, InMemoryPublisher
from .messages import Failure, ForwardOutcome, InboundMessage, Success
from .middleware import LoggingMiddleware, build_pipeline
from .ports import IMessageConsumer, IMessagePublisher, IMiddleware
from .router import ResultRouter, RouteResult

__all__ = [
    "Bridge",
    "BridgeMetrics",
    "BridgeState",
    "BusSettings",
    "ConfigurationError",
    "ConnectorConfig",
    "ConnectorError",
    "Failure",
    "ForwardOutcome",
    "ForwardingError",
    "IMessageConsumer",
    "IMessagePublisher",
    "IMiddleware",
    "InMemoryConsumer",
    "InMemoryMessageBus",
    "InMemoryPublisher",
    "InboundMessage",
    "InfrastructureError",
    "LoggingMiddleware",
    "MessagingConnectionError",
    "MessagingError",
    "PublishError",
    "ResultRouter",
    "RouteResult",
    "Success",
    "SubscriptionError",
    "build_pipeline",
]
