from __future__ import annotations

from typing import Any

from parlor.application.mappers.event_envelope import serialize_event
from parlor.application.ports.publisher import EventPublisher
from parlor.application.realtime.broadcaster import BroadcastEvent
from parlor.domain.events import EventType
from parlor.infrastructure.cache.redis_client import get_redis_client

EVENTS_CHANNEL = "parlor:events"


class RedisEventPublisher(EventPublisher):
    def __init__(self, channel: str = EVENTS_CHANNEL, timeout_seconds: float = 1.0) -> None:
        self._channel = channel
        self._timeout_seconds = timeout_seconds

    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        message = serialize_event(
            BroadcastEvent(type=EventType(event_type).value, payload=payload)
        )
        get_redis_client(timeout_seconds=self._timeout_seconds).publish(self._channel, message)
