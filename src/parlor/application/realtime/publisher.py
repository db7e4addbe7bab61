from __future__ import annotations

from typing import Any

from parlor.application.ports.publisher import EventPublisher
from parlor.application.realtime.broadcaster import Broadcaster


class BroadcasterPublisher(EventPublisher):
    def __init__(self, broadcaster: Broadcaster) -> None:
        self._broadcaster = broadcaster

    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        self._broadcaster.publish(event_type, payload)
