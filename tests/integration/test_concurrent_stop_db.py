from __future__ import annotations

import concurrent.futures
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from parlor.application.errors import NoActiveSessionError
from parlor.application.locks import TableLockRegistry
from parlor.application.realtime.broadcaster import Broadcaster
from parlor.application.realtime.publisher import BroadcasterPublisher
from parlor.application.use_cases.daily_summary import GetDailySummary
from parlor.application.use_cases.start_session import StartSession
from parlor.application.use_cases.stop_session import StopSession
from parlor.domain.common.ids import TableId
from parlor.infrastructure.db.repositories.ledger_store import SqlAlchemyLedgerStore


def test_concurrent_stops_close_one_session_and_count_it_once() -> None:
    store = SqlAlchemyLedgerStore()
    locks = TableLockRegistry()
    broadcaster = Broadcaster()
    publisher = BroadcasterPublisher(broadcaster)
    subscription = broadcaster.subscribe()
    table_id = TableId(3)

    before = GetDailySummary(store).execute()
    StartSession(store, locks, publisher).execute(table_id)
    stop = StopSession(store, locks, publisher)

    def _stop_once() -> str:
        try:
            stop.execute(table_id)
            return "STOPPED"
        except NoActiveSessionError:
            return "NO_ACTIVE_SESSION"

    with concurrent.futures.ThreadPoolExecutor(max_workers=10) as executor:
        results = list(executor.map(lambda _: _stop_once(), range(20)))

    assert results.count("STOPPED") == 1
    assert results.count("NO_ACTIVE_SESSION") == 19

    after = GetDailySummary(store).execute()
    assert after.sessionCount == before.sessionCount + 1

    event_types = []
    while (event := subscription.poll()) is not None:
        event_types.append(event.type)
    assert event_types.count("session:stop") == 1
    broadcaster.unsubscribe(subscription)
