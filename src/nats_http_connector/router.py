"""ResultRouter: publishes a forwarding outcome back onto the bus."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import PublishError
from .messages import Success

if TYPE_CHECKING:
    from .config import ConnectorConfig
    from .messages import Failure, ForwardOutcome
    from .ports import IMessagePublisher

logger = logging.getLogger(__name__)


class RouteResult(Enum):
    """Which branch :meth:`ResultRouter.route` took."""

    PUBLISHED_RESPONSE = "published_response"
    DROPPED = "dropped"
    PUBLISHED_ERROR = "published_error"
    PUBLISH_FAILED = "publish_failed"


class ResultRouter:
    """Routes ``Success`` bodies to the response topic and failures to the
    error topic.

    Every publish is attempted once. A failed publish is logged and never
    re-routed, so error reporting cannot loop on itself.
    """

    def __init__(self, publisher: IMessagePublisher, config: ConnectorConfig) -> None:
        self._publisher = publisher
        self.config = config

    async def route(self, outcome: ForwardOutcome) -> RouteResult:
        if isinstance(outcome, Success):
            return await self._route_success(outcome)
        return await self._route_failure(outcome)

    async def _route_success(self, outcome: Success) -> RouteResult:
        topic = self.config.response_topic
        if not topic:
            return RouteResult.DROPPED
        try:
            await self._publisher.publish(topic, outcome.body)
        except PublishError as e:
            logger.error(
                "failed to publish response body from http request to topic "
                "(topic=%s, source=%s, http_endpoint=%s): %s",
                topic,
                self.config.source_name,
                self.config.http_endpoint,
                e,
            )
            return RouteResult.PUBLISH_FAILED
        return RouteResult.PUBLISHED_RESPONSE

    async def _route_failure(self, outcome: Failure) -> RouteResult:
        topic = self.config.error_topic
        try:
            await self._publisher.publish(topic, outcome.description.encode("utf-8"))
        except PublishError as e:
            logger.error(
                "failed to publish message to error topic "
                "(topic=%s, source=%s): %s",
                topic,
                self.config.source_name,
                e,
            )
            return RouteResult.PUBLISH_FAILED
        return RouteResult.PUBLISHED_ERROR
