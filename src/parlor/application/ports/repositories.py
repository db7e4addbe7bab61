from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Protocol

from parlor.domain.common.ids import SessionId, TableId
from parlor.domain.daily.entities import DailyAggregate, DailyCompletion
from parlor.domain.session.entities import Session
from parlor.domain.table.entities import Table


class LedgerTransaction(Protocol):
    def get_table(self, table_id: TableId, *, for_update: bool = False) -> Table | None: ...

    def list_tables(self) -> list[Table]: ...

    def save_table(self, table: Table) -> None: ...

    def get_open_session(self, table_id: TableId) -> Session | None: ...

    def list_open_sessions(self) -> list[Session]: ...

    def get_session(self, session_id: SessionId, *, for_update: bool = False) -> Session | None: ...

    def add_session(self, session: Session) -> Session: ...

    def save_session(self, session: Session) -> None: ...

    def list_sessions_for_table(
        self,
        table_id: TableId,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Session], str | None]: ...

    def list_sessions(
        self,
        *,
        started_from: datetime | None,
        started_before: datetime | None,
        customer_phone: str | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Session], str | None]: ...

    def get_daily(self, business_date: date) -> DailyAggregate | None: ...

    def record_completion(self, completion: DailyCompletion) -> None: ...


class LedgerStore(Protocol):
    def transaction(self) -> AbstractContextManager[LedgerTransaction]: ...


class StorageError(Exception):
    pass


class InvalidCursorError(Exception):
    pass
