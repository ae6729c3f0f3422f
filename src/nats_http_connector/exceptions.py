"""Exceptions for nats-http-connector."""

from __future__ import annotations


class ConnectorError(Exception):
    """Root exception for the connector."""


class ConfigurationError(ConnectorError):
    """Raised when connector metadata or bus settings are missing or invalid.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))


class InfrastructureError(ConnectorError):
    """Base class for all infrastructure-related errors."""


class MessagingError(InfrastructureError):
    """Base class for all messaging-related infrastructure errors."""


class MessagingConnectionError(MessagingError):
    """Raised when connectivity to the message bus fails."""


class SubscriptionError(MessagingError):
    """Raised when the bus rejects a subscription."""

    def __init__(self, message: str, topic: str | None = None) -> None:
        self.topic = topic
        super().__init__(message)


class PublishError(MessagingError):
    """Raised when a payload cannot be published to a topic."""

    def __init__(self, message: str, topic: str | None = None) -> None:
        self.topic = topic
        super().__init__(message)


class ForwardingError(InfrastructureError):
    """Raised (or carried in a Failure outcome) when the HTTP call fails.

    Only transport and body-read failures count; HTTP status codes never do.
    """

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        self.endpoint = endpoint
        super().__init__(message)
