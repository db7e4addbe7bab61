from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent))

from ledger_fakes import (
    START,
    FakeClock,
    FakeLights,
    FakePublisher,
    InMemoryLedgerStore,
    make_table,
)

from parlor.application.dto.requests import TableStatusRequest
from parlor.application.errors import InvalidTransitionError, TableNotFoundError
from parlor.application.locks import TableLockRegistry
from parlor.application.use_cases.start_session import StartSession
from parlor.application.use_cases.table_status import SetTableStatus
from parlor.domain.common.ids import TableId
from parlor.domain.table.entities import TableStatus


def _use_case(store: InMemoryLedgerStore, publisher: FakePublisher, lights: FakeLights):
    return SetTableStatus(
        store, TableLockRegistry(), publisher, lights=lights, clock=FakeClock()
    )


def test_available_table_goes_into_maintenance() -> None:
    store = InMemoryLedgerStore([make_table(2)])
    publisher = FakePublisher()

    response = _use_case(store, publisher, FakeLights()).execute(
        TableId(2), TableStatusRequest(status=TableStatus.MAINTENANCE)
    )

    assert response.status == "MAINTENANCE"
    assert response.lastMaintenanceAt == START
    assert store.tables[TableId(2)].status == TableStatus.MAINTENANCE
    assert publisher.types() == ["table:update"]
    assert publisher.events[0][1]["table"]["status"] == "MAINTENANCE"


def test_unchanged_status_publishes_nothing() -> None:
    store = InMemoryLedgerStore([make_table(2)])
    publisher = FakePublisher()

    response = _use_case(store, publisher, FakeLights()).execute(
        TableId(2), TableStatusRequest(status=TableStatus.AVAILABLE)
    )

    assert response.status == "AVAILABLE"
    assert publisher.events == []


def test_occupied_target_is_invalid() -> None:
    store = InMemoryLedgerStore([make_table(2)])

    with pytest.raises(InvalidTransitionError):
        _use_case(store, FakePublisher(), FakeLights()).execute(
            TableId(2), TableStatusRequest(status=TableStatus.OCCUPIED)
        )


def test_table_with_open_session_cannot_change_status() -> None:
    store = InMemoryLedgerStore([make_table(2)])
    locks = TableLockRegistry()
    StartSession(store, locks, FakePublisher(), clock=FakeClock()).execute(TableId(2))
    publisher = FakePublisher()

    with pytest.raises(InvalidTransitionError):
        SetTableStatus(store, locks, publisher, clock=FakeClock()).execute(
            TableId(2), TableStatusRequest(status=TableStatus.MAINTENANCE)
        )

    assert store.tables[TableId(2)].status == TableStatus.OCCUPIED
    assert publisher.events == []


def test_unknown_table() -> None:
    store = InMemoryLedgerStore([make_table(2)])

    with pytest.raises(TableNotFoundError):
        _use_case(store, FakePublisher(), FakeLights()).execute(
            TableId(9), TableStatusRequest(status=TableStatus.MAINTENANCE)
        )
