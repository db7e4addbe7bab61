from __future__ import annotations

from parlor.application.dto.responses import (
    RunningAmountResponse,
    TableDetailResponse,
    TableListResponse,
)
from parlor.application.mappers.session_mapper import (
    to_running_amount_response,
    to_session_response,
)
from parlor.application.mappers.table_mapper import to_table_response
from parlor.application.use_cases.base import LedgerQuery
from parlor.domain.common.ids import TableId
from parlor.domain.session.entities import Session
from parlor.domain.table.entities import Table


def _detail(
    table: Table,
    session: Session | None,
    running: RunningAmountResponse,
) -> TableDetailResponse:
    return TableDetailResponse(
        table=to_table_response(table),
        session=to_session_response(session) if session is not None else None,
        running=running,
    )


class GetRunningAmount(LedgerQuery):
    operation = "running_amount"

    def execute(self, table_id: TableId) -> RunningAmountResponse:
        with self._transaction() as tx:
            table = self._require_table(tx, table_id)
            session = tx.get_open_session(table_id)
        return to_running_amount_response(table, session, self._clock())


class GetTable(LedgerQuery):
    operation = "get_table"

    def execute(self, table_id: TableId) -> TableDetailResponse:
        with self._transaction() as tx:
            table = self._require_table(tx, table_id)
            session = tx.get_open_session(table_id)
        return _detail(table, session, to_running_amount_response(table, session, self._clock()))


class ListTables(LedgerQuery):
    operation = "list_tables"

    def execute(self) -> TableListResponse:
        with self._transaction() as tx:
            tables = tx.list_tables()
            open_sessions = {session.table_id: session for session in tx.list_open_sessions()}
        now = self._clock()
        return TableListResponse(
            tables=[
                _detail(
                    table,
                    open_sessions.get(table.table_id),
                    to_running_amount_response(table, open_sessions.get(table.table_id), now),
                )
                for table in tables
            ]
        )
