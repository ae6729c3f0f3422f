"""Pytest fixtures shared by the connector tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the package is importable when running pytest from the repo root
# without pip install -e .
_src = Path(__file__).resolve().parent.parent / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from nats_http_connector.config import ConnectorConfig  # noqa: E402
from nats_http_connector.memory import (  # noqa: E402
    InMemoryConsumer,
    InMemoryPublisher,
)


@pytest.fixture
def config() -> ConnectorConfig:
    return ConnectorConfig(
        topic="events",
        response_topic="acks",
        error_topic="errs",
        http_endpoint="http://endpoint.test/hook",
        content_type="text/plain",
        source_name="nats-test",
    )


@pytest.fixture
def publisher() -> InMemoryPublisher:
    return InMemoryPublisher()


@pytest.fixture
def consumer(publisher: InMemoryPublisher) -> InMemoryConsumer:
    return InMemoryConsumer(publisher.bus)
