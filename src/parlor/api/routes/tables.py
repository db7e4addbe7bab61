from __future__ import annotations

from fastapi import APIRouter, Query, Request

from parlor.api.runtime import LedgerRuntime
from parlor.application.dto.requests import TableStatusRequest
from parlor.application.dto.responses import (
    RunningAmountResponse,
    SessionHistoryResponse,
    TableDetailResponse,
    TableListResponse,
    TableResponse,
)
from parlor.application.use_cases.session_history import ListTableSessions
from parlor.application.use_cases.table_status import SetTableStatus
from parlor.application.use_cases.tables import GetRunningAmount, GetTable, ListTables
from parlor.domain.common.ids import TableId

router = APIRouter()


def _runtime(request: Request) -> LedgerRuntime:
    return request.app.state.ledger


def _set_table_status_use_case(request: Request) -> SetTableStatus:
    runtime = _runtime(request)
    return SetTableStatus(
        store=runtime.store,
        locks=runtime.locks,
        publisher=runtime.publisher,
        lights=runtime.lights,
    )


@router.get("/v1/tables", response_model=TableListResponse)
def list_tables(request: Request) -> TableListResponse:
    return ListTables(store=_runtime(request).store).execute()


@router.get("/v1/tables/{table_id}", response_model=TableDetailResponse)
def get_table(table_id: int, request: Request) -> TableDetailResponse:
    return GetTable(store=_runtime(request).store).execute(TableId(table_id))


@router.get("/v1/tables/{table_id}/running", response_model=RunningAmountResponse)
def get_running_amount(table_id: int, request: Request) -> RunningAmountResponse:
    return GetRunningAmount(store=_runtime(request).store).execute(TableId(table_id))


@router.patch("/v1/tables/{table_id}/status", response_model=TableResponse)
def set_table_status(
    table_id: int,
    request_dto: TableStatusRequest,
    request: Request,
) -> TableResponse:
    return _set_table_status_use_case(request).execute(TableId(table_id), request_dto)


@router.get("/v1/tables/{table_id}/sessions", response_model=SessionHistoryResponse)
def list_table_sessions(
    table_id: int,
    request: Request,
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
) -> SessionHistoryResponse:
    return ListTableSessions(store=_runtime(request).store).execute(
        TableId(table_id),
        limit=limit,
        cursor=cursor,
    )
