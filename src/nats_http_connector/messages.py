"""Per-message types: the inbound bus message and the forwarding outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class InboundMessage:
    """Opaque payload delivered by the bus for one event."""

    topic: str
    payload: bytes
    headers: dict[str, str] = field(default_factory=dict)
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Success:
    """The endpoint answered and its full body was read.

    ``status_code`` is kept for logging only; it is never used for routing.
    """

    body: bytes
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """The request could not be completed (transport or body-read failure)."""

    error: BaseException

    @property
    def ok(self) -> bool:
        return False

    @property
    def description(self) -> str:
        """Text published to the error topic."""
        return str(self.error) or type(self.error).__name__


ForwardOutcome = Success | Failure
