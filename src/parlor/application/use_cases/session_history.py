from __future__ import annotations

from datetime import date

from parlor.application.dto.responses import SessionHistoryResponse
from parlor.application.errors import (
    InvalidSessionHistoryCursorError,
    InvalidSessionHistoryLimitError,
)
from parlor.application.mappers.session_mapper import to_session_response
from parlor.application.ports.repositories import InvalidCursorError, LedgerStore
from parlor.application.use_cases.base import Clock, LedgerQuery
from parlor.domain.common.ids import TableId
from parlor.domain.daily.entities import business_day_bounds

MAX_PAGE_SIZE = 200


def _check_limit(limit: int) -> None:
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidSessionHistoryLimitError(f"limit must be between 1 and {MAX_PAGE_SIZE}")


class ListTableSessions(LedgerQuery):
    operation = "session_history"

    def execute(
        self,
        table_id: TableId,
        *,
        limit: int = 50,
        cursor: str | None = None,
    ) -> SessionHistoryResponse:
        _check_limit(limit)

        with self._transaction() as tx:
            self._require_table(tx, table_id)
            try:
                sessions, next_cursor = tx.list_sessions_for_table(
                    table_id=table_id,
                    limit=limit,
                    cursor=cursor,
                )
            except InvalidCursorError as exc:
                raise InvalidSessionHistoryCursorError("invalid cursor") from exc

        return SessionHistoryResponse(
            sessions=[to_session_response(session) for session in sessions],
            nextCursor=next_cursor,
        )


class ListSessions(LedgerQuery):
    """Sessions across every table, newest first, optionally narrowed to one
    local business date and/or one customer phone."""

    operation = "list_sessions"

    def __init__(
        self,
        store: LedgerStore,
        clock: Clock | None = None,
        venue_timezone: str = "UTC",
    ) -> None:
        super().__init__(store, clock)
        self._venue_timezone = venue_timezone

    def execute(
        self,
        *,
        business_date: date | None = None,
        customer_phone: str | None = None,
        limit: int = 50,
        cursor: str | None = None,
    ) -> SessionHistoryResponse:
        _check_limit(limit)
        started_from = started_before = None
        if business_date is not None:
            started_from, started_before = business_day_bounds(
                business_date, self._venue_timezone
            )

        with self._transaction() as tx:
            try:
                sessions, next_cursor = tx.list_sessions(
                    started_from=started_from,
                    started_before=started_before,
                    customer_phone=customer_phone or None,
                    limit=limit,
                    cursor=cursor,
                )
            except InvalidCursorError as exc:
                raise InvalidSessionHistoryCursorError("invalid cursor") from exc

        return SessionHistoryResponse(
            sessions=[to_session_response(session) for session in sessions],
            nextCursor=next_cursor,
        )
