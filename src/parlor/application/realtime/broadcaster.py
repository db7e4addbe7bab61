from __future__ import annotations

import asyncio
import logging
import queue
import threading
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from parlor.application.metrics.ledger import (
    record_broadcast,
    record_subscriber_count,
    record_subscriber_pruned,
)
from parlor.domain.events import EventType

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BroadcastEvent:
    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utc_now)


class SubscriberGoneError(Exception):
    pass


class Subscription:
    def __init__(self, subscriber_id: str, max_pending: int) -> None:
        self.subscriber_id = subscriber_id
        self.last_heartbeat_at: datetime | None = None
        self.missed_heartbeats = 0
        self._mailbox: queue.Queue[BroadcastEvent] = queue.Queue(maxsize=max_pending)
        self._lock = threading.Lock()
        self._closed = False
        self._heartbeat_pending = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wakeup: asyncio.Event | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def heartbeat_pending(self) -> bool:
        with self._lock:
            return self._heartbeat_pending

    def offer(self, event: BroadcastEvent) -> None:
        with self._lock:
            if self._closed:
                raise SubscriberGoneError(f"subscriber {self.subscriber_id} is closed")
            try:
                self._mailbox.put_nowait(event)
            except queue.Full as exc:
                raise SubscriberGoneError(
                    f"subscriber {self.subscriber_id} mailbox is full"
                ) from exc
            if event.type == EventType.HEARTBEAT.value:
                self._heartbeat_pending = True
        self._wake()

    def poll(self) -> BroadcastEvent | None:
        try:
            event = self._mailbox.get_nowait()
        except queue.Empty:
            return None
        if event.type == EventType.HEARTBEAT.value:
            with self._lock:
                self._heartbeat_pending = False
        return event

    async def stream(self) -> AsyncIterator[BroadcastEvent]:
        """Yield events as they are offered; ends once the subscription is closed."""
        wakeup = asyncio.Event()
        with self._lock:
            self._loop = asyncio.get_running_loop()
            self._wakeup = wakeup
        try:
            while not self._closed:
                event = self.poll()
                if event is not None:
                    yield event
                    continue
                wakeup.clear()
                # an offer between poll() and clear() is still in the mailbox
                if self._mailbox.empty() and not self._closed:
                    await wakeup.wait()
        finally:
            with self._lock:
                self._loop = None
                self._wakeup = None

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self._wake()

    def _wake(self) -> None:
        with self._lock:
            loop, wakeup = self._loop, self._wakeup
        if loop is None or wakeup is None:
            return
        try:
            loop.call_soon_threadsafe(wakeup.set)
        except RuntimeError:
            # consumer loop already closed; nothing left to wake
            return

    def mark_heartbeat_sent(self, now: datetime) -> None:
        self.last_heartbeat_at = now
        self.missed_heartbeats = 0


class Broadcaster:
    """Fan-out hub. Each subscriber has its own bounded mailbox.

    Publishes are serialized so every subscriber sees events in publish order.
    A failed write removes only the failing subscriber.
    """

    def __init__(
        self,
        *,
        max_pending: int = 256,
        max_missed_heartbeats: int = 3,
        clock: Clock | None = None,
    ) -> None:
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        if max_missed_heartbeats < 1:
            raise ValueError("max_missed_heartbeats must be at least 1")
        self._max_pending = max_pending
        self._max_missed = max_missed_heartbeats
        self._clock = clock or _utc_now
        self._subscriptions: dict[str, Subscription] = {}
        self._registry_lock = threading.Lock()
        self._publish_lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._registry_lock:
            return len(self._subscriptions)

    def subscribe(self, client_id: str | None = None) -> Subscription:
        subscription = Subscription(client_id or uuid4().hex, self._max_pending)
        connected = BroadcastEvent(
            type=EventType.CONNECTED.value,
            payload={"subscriberId": subscription.subscriber_id},
            timestamp=self._clock(),
        )
        with self._publish_lock:
            subscription.offer(connected)
            with self._registry_lock:
                self._subscriptions[subscription.subscriber_id] = subscription
                count = len(self._subscriptions)
        record_subscriber_count(count)
        logger.info(
            "broadcast_subscribed",
            extra={"subscriber_id": subscription.subscriber_id, "subscribers": count},
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.close()
        self._remove([subscription], reason="unsubscribed")

    def publish(self, event_type: EventType | str, payload: dict[str, Any]) -> int:
        return self.deliver(
            BroadcastEvent(
                type=EventType(event_type).value,
                payload=payload,
                timestamp=self._clock(),
            )
        )

    def deliver(self, event: BroadcastEvent) -> int:
        delivered = 0
        with self._publish_lock:
            failed: list[Subscription] = []
            for subscription in self._snapshot():
                try:
                    subscription.offer(event)
                    delivered += 1
                except SubscriberGoneError:
                    failed.append(subscription)
            self._remove(failed, reason="write_failed")
        record_broadcast(event.type)
        return delivered

    def heartbeat(self) -> list[str]:
        """Push a heartbeat to every subscriber and prune the unresponsive ones.

        Returns the ids of pruned subscribers.
        """
        now = self._clock()
        event = BroadcastEvent(
            type=EventType.HEARTBEAT.value,
            payload={"timestamp": now.isoformat()},
            timestamp=now,
        )
        failed: list[Subscription] = []
        silent: list[Subscription] = []
        with self._publish_lock:
            for subscription in self._snapshot():
                if subscription.heartbeat_pending:
                    subscription.missed_heartbeats += 1
                    if subscription.missed_heartbeats >= self._max_missed:
                        silent.append(subscription)
                    continue
                try:
                    subscription.offer(event)
                except SubscriberGoneError:
                    failed.append(subscription)
                    continue
                subscription.mark_heartbeat_sent(now)
            self._remove(failed, reason="write_failed")
            self._remove(silent, reason="missed_heartbeats")
        return [subscription.subscriber_id for subscription in failed + silent]

    def close_all(self) -> None:
        with self._registry_lock:
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()
        for subscription in subscriptions:
            subscription.close()
        record_subscriber_count(0)

    def _snapshot(self) -> list[Subscription]:
        with self._registry_lock:
            return list(self._subscriptions.values())

    def _remove(self, subscriptions: list[Subscription], reason: str) -> None:
        if not subscriptions:
            return
        removed: list[str] = []
        with self._registry_lock:
            for subscription in subscriptions:
                if self._subscriptions.pop(subscription.subscriber_id, None) is not None:
                    removed.append(subscription.subscriber_id)
            count = len(self._subscriptions)
        for subscription in subscriptions:
            subscription.close()
        for subscriber_id in removed:
            record_subscriber_pruned(reason)
            logger.info(
                "broadcast_subscriber_removed",
                extra={"subscriber_id": subscriber_id, "reason": reason, "subscribers": count},
            )
        record_subscriber_count(count)
