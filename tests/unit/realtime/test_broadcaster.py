from __future__ import annotations

import asyncio
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from parlor.application.realtime.broadcaster import BroadcastEvent, Broadcaster
from parlor.application.realtime.heartbeat import run_heartbeat
from parlor.application.realtime.publisher import BroadcasterPublisher

NOW = datetime(2026, 3, 14, 18, 0, 0, tzinfo=timezone.utc)


def _drain(subscription) -> list[BroadcastEvent]:
    events = []
    while True:
        event = subscription.poll()
        if event is None:
            return events
        events.append(event)


def test_connected_is_first_event() -> None:
    broadcaster = Broadcaster(clock=lambda: NOW)

    subscription = broadcaster.subscribe("client-a")

    event = subscription.poll()
    assert event.type == "connected"
    assert event.payload == {"subscriberId": "client-a"}
    assert broadcaster.subscriber_count == 1


def test_publish_reaches_every_subscriber_in_order() -> None:
    broadcaster = Broadcaster(clock=lambda: NOW)
    first = broadcaster.subscribe()
    second = broadcaster.subscribe()

    broadcaster.publish("session:start", {"n": 1})
    broadcaster.publish("session:pause", {"n": 2})
    broadcaster.publish("session:resume", {"n": 3})

    for subscription in (first, second):
        events = _drain(subscription)
        assert [event.type for event in events] == [
            "connected",
            "session:start",
            "session:pause",
            "session:resume",
        ]


def test_publish_from_many_threads_keeps_per_subscriber_order_consistent() -> None:
    broadcaster = Broadcaster(max_pending=1000)
    first = broadcaster.subscribe()
    second = broadcaster.subscribe()

    def worker(offset: int) -> None:
        for index in range(50):
            broadcaster.publish("table:update", {"n": offset + index})

    threads = [threading.Thread(target=worker, args=(offset * 100,)) for offset in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    first_order = [event.payload.get("n") for event in _drain(first)]
    second_order = [event.payload.get("n") for event in _drain(second)]
    assert len(first_order) == 201
    assert first_order == second_order


def test_unknown_event_type_is_rejected() -> None:
    broadcaster = Broadcaster()

    with pytest.raises(ValueError):
        broadcaster.publish("order:placed", {})


def test_full_mailbox_prunes_only_that_subscriber() -> None:
    broadcaster = Broadcaster(max_pending=3)
    slow = broadcaster.subscribe("slow")
    fast = broadcaster.subscribe("fast")

    for index in range(5):
        broadcaster.publish("table:update", {"n": index})
        _drain(fast)

    assert slow.closed is True
    assert fast.closed is False
    assert broadcaster.subscriber_count == 1


def test_closed_subscriber_is_pruned_on_next_publish() -> None:
    broadcaster = Broadcaster()
    gone = broadcaster.subscribe()
    alive = broadcaster.subscribe()
    gone.close()

    delivered = broadcaster.publish("session:update", {})

    assert delivered == 1
    assert broadcaster.subscriber_count == 1
    assert [event.type for event in _drain(alive)][-1] == "session:update"


def test_unsubscribe_removes_subscription() -> None:
    broadcaster = Broadcaster()
    subscription = broadcaster.subscribe()

    broadcaster.unsubscribe(subscription)

    assert broadcaster.subscriber_count == 0
    assert subscription.closed is True
    assert broadcaster.publish("table:update", {}) == 0


def test_heartbeat_prunes_after_three_unconsumed_heartbeats() -> None:
    broadcaster = Broadcaster(max_missed_heartbeats=3, clock=lambda: NOW)
    silent = broadcaster.subscribe("silent")
    responsive = broadcaster.subscribe("responsive")

    pruned: list[str] = []
    for _ in range(4):
        pruned.extend(broadcaster.heartbeat())
        _drain(responsive)

    assert pruned == ["silent"]
    assert silent.closed is True
    assert responsive.missed_heartbeats == 0
    assert responsive.last_heartbeat_at == NOW
    assert broadcaster.subscriber_count == 1


def test_consuming_heartbeat_resets_missed_count() -> None:
    broadcaster = Broadcaster(max_missed_heartbeats=3)
    subscription = broadcaster.subscribe()

    broadcaster.heartbeat()
    broadcaster.heartbeat()
    assert subscription.missed_heartbeats == 1

    _drain(subscription)
    broadcaster.heartbeat()

    assert subscription.missed_heartbeats == 0
    assert subscription.closed is False


def test_close_all_closes_every_subscription() -> None:
    broadcaster = Broadcaster()
    subscriptions = [broadcaster.subscribe() for _ in range(3)]

    broadcaster.close_all()

    assert broadcaster.subscriber_count == 0
    assert all(subscription.closed for subscription in subscriptions)


def test_broadcaster_publisher_adapts_port() -> None:
    broadcaster = Broadcaster()
    subscription = broadcaster.subscribe()

    BroadcasterPublisher(broadcaster).publish("session:stop", {"table": {"tableId": 1}})

    events = _drain(subscription)
    assert events[-1].type == "session:stop"
    assert events[-1].payload == {"table": {"tableId": 1}}


def test_stream_yields_until_closed() -> None:
    broadcaster = Broadcaster()
    subscription = broadcaster.subscribe()
    broadcaster.publish("table:update", {"n": 1})

    async def collect() -> list[str]:
        received = []
        async for event in subscription.stream():
            received.append(event.type)
            if len(received) == 2:
                broadcaster.unsubscribe(subscription)
        return received

    assert asyncio.run(collect()) == ["connected", "table:update"]


def test_stream_wakes_for_events_published_from_another_thread() -> None:
    broadcaster = Broadcaster()
    subscription = broadcaster.subscribe()

    async def collect() -> list[str]:
        received = []
        publisher = threading.Timer(0.05, broadcaster.publish, args=("table:update", {"n": 1}))
        publisher.start()
        async for event in subscription.stream():
            received.append(event.type)
            if event.type == "table:update":
                break
        publisher.join()
        return received

    assert asyncio.run(asyncio.wait_for(collect(), timeout=5)) == ["connected", "table:update"]


def test_stream_ends_when_subscription_is_dropped() -> None:
    broadcaster = Broadcaster()
    subscription = broadcaster.subscribe()

    async def collect() -> list[str]:
        closer = threading.Timer(0.05, broadcaster.close_all)
        closer.start()
        received = [event.type async for event in subscription.stream()]
        closer.join()
        return received

    assert asyncio.run(asyncio.wait_for(collect(), timeout=5)) == ["connected"]


def test_run_heartbeat_ticks_on_interval() -> None:
    broadcaster = Broadcaster()
    subscription = broadcaster.subscribe()

    async def tick() -> None:
        task = asyncio.create_task(run_heartbeat(broadcaster, interval_seconds=0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(tick())

    assert "heartbeat" in [event.type for event in _drain(subscription)]
