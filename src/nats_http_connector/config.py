"""Connector metadata and bus settings, loaded from environment variables.

Both records are validated once at startup and are read-only afterwards, so
every message handler can share them without synchronization.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_SOURCE_NAME = "KEDAConnector"
DEFAULT_HTTP_METHOD = "POST"
DEFAULT_HTTP_TIMEOUT = 30.0

_CONNECTOR_ENV = {
    "topic": "TOPIC",
    "response_topic": "RESPONSE_TOPIC",
    "error_topic": "ERROR_TOPIC",
    "http_endpoint": "HTTP_ENDPOINT",
    "content_type": "CONTENT_TYPE",
    "source_name": "SOURCE_NAME",
    "http_method": "HTTP_METHOD",
    "http_timeout": "HTTP_TIMEOUT",
}

_BUS_ENV = {
    "host": "HOST",
    "include_unacked": "INCLUDE_UNACKED",
    "concurrency": "CONCURRENCY",
    "drain_timeout": "DRAIN_TIMEOUT",
    "queue_group": "QUEUE_GROUP",
}


def _errors_from(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
        errors.setdefault(loc, []).append(error.get("msg", "validation error"))
    return errors


def _collect(environ: Mapping[str, str], mapping: dict[str, str]) -> dict[str, Any]:
    """Pick the env vars that are set; unset ones fall back to field defaults."""
    return {field: environ[var] for field, var in mapping.items() if var in environ}


class ConnectorConfig(BaseModel):
    """Immutable connector metadata.

    ``response_topic`` may be empty, meaning successful responses are not
    published anywhere. ``topic``, ``error_topic`` and ``http_endpoint`` are
    required.
    """

    model_config = ConfigDict(frozen=True)

    topic: str
    error_topic: str
    http_endpoint: str
    response_topic: str = ""
    content_type: str = DEFAULT_CONTENT_TYPE
    source_name: str = DEFAULT_SOURCE_NAME
    http_method: str = DEFAULT_HTTP_METHOD
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)

    @field_validator("topic", "error_topic", "http_endpoint")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator(
        "topic", "response_topic", "error_topic", "content_type", "source_name"
    )
    @classmethod
    def _header_safe(cls, value: str) -> str:
        # sent verbatim as HTTP header values
        if not (value.isascii() and value.isprintable()):
            raise ValueError(f"must be printable ASCII: {value!r}")
        return value

    @field_validator("http_endpoint")
    @classmethod
    def _http_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"not an http(s) URL: {value!r}")
        return value

    @field_validator("http_method")
    @classmethod
    def _method(cls, value: str) -> str:
        method = value.strip().upper()
        if not method:
            raise ValueError("must not be empty")
        return method

    @classmethod
    def create(cls, **values: Any) -> ConnectorConfig:
        """Validate *values*, raising ConfigurationError instead of pydantic's."""
        try:
            return cls.model_validate(values)
        except PydanticValidationError as exc:
            raise ConfigurationError(_errors_from(exc)) from exc

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConnectorConfig:
        """Load connector metadata from ``TOPIC``, ``HTTP_ENDPOINT``, etc.

        ``MAX_RETRIES`` is tolerated but ignored; the connector never retries.
        """
        env = os.environ if environ is None else environ
        values = _collect(env, _CONNECTOR_ENV)
        for required in ("topic", "error_topic", "http_endpoint"):
            values.setdefault(required, "")
        return cls.create(**values)

    def headers(self) -> dict[str, str]:
        """Headers sent with every forwarded request, verbatim from config."""
        return {
            "Topic": self.topic,
            "RespTopic": self.response_topic,
            "ErrorTopic": self.error_topic,
            "Content-Type": self.content_type,
            "Source-Name": self.source_name,
        }


class BusSettings(BaseModel):
    """Connection target and delivery options for the message bus.

    ``queue_group`` empty means a plain subscription; replicas sharing a
    non-empty group split the topic's messages between them.
    """

    model_config = ConfigDict(frozen=True)

    host: str
    include_unacked: str = ""
    concurrency: int = Field(default=1, ge=1)
    drain_timeout: float = Field(default=30.0, ge=0)
    queue_group: str = ""

    @field_validator("include_unacked")
    @classmethod
    def _no_unacked(cls, value: str) -> str:
        # only the literal "true" selects the unsupported mode
        if value == "true":
            raise ValueError("only nats protocol host is supported")
        return value

    @field_validator("host")
    @classmethod
    def _host(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("received empty host field")
        return value

    @classmethod
    def create(cls, **values: Any) -> BusSettings:
        try:
            return cls.model_validate(values)
        except PydanticValidationError as exc:
            raise ConfigurationError(_errors_from(exc)) from exc

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BusSettings:
        env = os.environ if environ is None else environ
        values = _collect(env, _BUS_ENV)
        values.setdefault("host", "")
        return cls.create(**values)
