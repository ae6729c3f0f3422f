"""In-memory bus adapters for tests and local runs."""

from __future__ import annotations

from .bus import InMemoryMessageBus
from .consumer import InMemoryConsumer
from .publisher import InMemoryPublisher

__all__ = [
    "InMemoryMessageBus",
    "InMemoryConsumer",
    "InMemoryPublisher",
]
