"""Redis Pub/Sub publisher for routing events."""
from __future__ import annotations

import logging

import redis.asyncio as aioredis

from support_router.application.ports.events import RoutingEvent
from support_router.infrastructure.bus.serializer import encode_event

logger = logging.getLogger(__name__)


class RedisPubSubPublisher:
    """Implements application.ports.events.EventPublisher."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def publish(self, channel: str, event: RoutingEvent) -> None:
        receivers = await self._redis.publish(channel, encode_event(event))
        if not receivers:
            logger.debug("No subscribers on %s for %s", channel, event.event_type)
