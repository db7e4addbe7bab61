from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from parlor.application.errors import (
    LedgerError,
    NoActiveSessionError,
    StorageFailureError,
    TableNotFoundError,
)
from parlor.application.locks import TableLockRegistry
from parlor.application.metrics.ledger import record_rejection
from parlor.application.ports.publisher import EventPublisher
from parlor.application.ports.repositories import LedgerStore, LedgerTransaction, StorageError
from parlor.application.side_effects import LightDispatcher
from parlor.domain.common.ids import TableId
from parlor.domain.events import EventType
from parlor.domain.session.entities import Session
from parlor.domain.table.entities import Table

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LedgerQuery:
    operation = "query"

    def __init__(self, store: LedgerStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or utc_now

    @contextmanager
    def _transaction(self) -> Iterator[LedgerTransaction]:
        try:
            with self._store.transaction() as tx:
                yield tx
        except StorageError as exc:
            record_rejection(self.operation, StorageFailureError.code)
            raise StorageFailureError(f"storage unavailable: {exc}") from exc
        except LedgerError as exc:
            record_rejection(self.operation, exc.code)
            raise

    def _require_table(
        self,
        tx: LedgerTransaction,
        table_id: TableId,
        *,
        for_update: bool = False,
    ) -> Table:
        table = tx.get_table(table_id, for_update=for_update)
        if table is None:
            raise TableNotFoundError(
                f"table not found for table_id={table_id}",
                details={"tableId": int(table_id)},
            )
        return table


class LedgerCommand(LedgerQuery):
    """Mutating operation: per-table lock around one store transaction, events after release."""

    operation = "command"

    def __init__(
        self,
        store: LedgerStore,
        locks: TableLockRegistry,
        publisher: EventPublisher,
        lights: LightDispatcher | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(store, clock)
        self._locks = locks
        self._publisher = publisher
        self._lights = lights

    @contextmanager
    def _locked_transaction(self, table_id: TableId) -> Iterator[LedgerTransaction]:
        with self._locks.hold(table_id):
            with self._transaction() as tx:
                yield tx

    def _require_open_session(self, tx: LedgerTransaction, table: Table) -> Session:
        session = tx.get_open_session(table.table_id)
        if session is None:
            raise NoActiveSessionError(
                f"no active session on table {table.table_id}",
                details={"tableId": int(table.table_id)},
            )
        return session

    def _publish(self, event_type: EventType, payload: dict[str, Any]) -> None:
        try:
            self._publisher.publish(event_type.value, payload)
        except Exception:
            logger.exception("event_publish_failed", extra={"event_type": event_type.value})

    def _request_light(self, table_id: TableId, on: bool) -> None:
        if self._lights is None:
            return
        self._lights.request(table_id, on)
