"""NATS transport adapter built on nats-py."""

from __future__ import annotations

from .connection import NatsConnectionManager
from .consumer import NatsConsumer
from .publisher import NatsPublisher

__all__ = [
    "NatsConnectionManager",
    "NatsConsumer",
    "NatsPublisher",
]
