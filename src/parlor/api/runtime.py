from __future__ import annotations

import os
from dataclasses import dataclass

from parlor.application.locks import TableLockRegistry
from parlor.application.ports.publisher import EventPublisher
from parlor.application.ports.repositories import LedgerStore
from parlor.application.realtime.broadcaster import Broadcaster
from parlor.application.realtime.publisher import BroadcasterPublisher
from parlor.application.side_effects import LightDispatcher
from parlor.domain.daily.entities import venue_zone
from parlor.infrastructure.cache.redis_client import redis_configured
from parlor.infrastructure.db.repositories.ledger_store import SqlAlchemyLedgerStore
from parlor.infrastructure.hardware.light_client import build_light_controller
from parlor.infrastructure.messaging.redis_publisher import RedisEventPublisher


@dataclass
class LedgerRuntime:
    store: LedgerStore
    locks: TableLockRegistry
    broadcaster: Broadcaster
    publisher: EventPublisher
    lights: LightDispatcher
    venue_timezone: str
    heartbeat_interval_seconds: float

    def shutdown(self) -> None:
        self.lights.shutdown(wait=False)
        self.broadcaster.close_all()


def build_runtime() -> LedgerRuntime:
    venue_timezone = os.getenv("VENUE_TIMEZONE", "UTC")
    venue_zone(venue_timezone)

    broadcaster = Broadcaster(
        max_pending=int(os.getenv("SUBSCRIBER_MAX_PENDING", "256")),
        max_missed_heartbeats=int(os.getenv("HEARTBEAT_MAX_MISSED", "3")),
    )
    publisher: EventPublisher
    if redis_configured():
        publisher = RedisEventPublisher()
    else:
        publisher = BroadcasterPublisher(broadcaster)

    return LedgerRuntime(
        store=SqlAlchemyLedgerStore(),
        locks=TableLockRegistry(),
        broadcaster=broadcaster,
        publisher=publisher,
        lights=LightDispatcher(build_light_controller()),
        venue_timezone=venue_timezone,
        heartbeat_interval_seconds=float(os.getenv("HEARTBEAT_INTERVAL_SECONDS", "30")),
    )
