from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query, Request, status

from parlor.api.runtime import LedgerRuntime
from parlor.application.dto.requests import (
    SessionPatchRequest,
    StartSessionRequest,
    StopSessionRequest,
)
from parlor.application.dto.responses import (
    SessionHistoryResponse,
    SessionResponse,
    SessionTransitionResponse,
    StopSessionResponse,
)
from parlor.application.use_cases.session_breaks import PauseSession, ResumeSession
from parlor.application.use_cases.session_history import ListSessions
from parlor.application.use_cases.start_session import StartSession
from parlor.application.use_cases.stop_session import StopSession
from parlor.application.use_cases.update_session import UpdateSessionDetails
from parlor.domain.common.ids import SessionId, TableId

router = APIRouter()


def _runtime(request: Request) -> LedgerRuntime:
    return request.app.state.ledger


def _start_session_use_case(request: Request) -> StartSession:
    runtime = _runtime(request)
    return StartSession(
        store=runtime.store,
        locks=runtime.locks,
        publisher=runtime.publisher,
        lights=runtime.lights,
    )


def _pause_session_use_case(request: Request) -> PauseSession:
    runtime = _runtime(request)
    return PauseSession(store=runtime.store, locks=runtime.locks, publisher=runtime.publisher)


def _resume_session_use_case(request: Request) -> ResumeSession:
    runtime = _runtime(request)
    return ResumeSession(store=runtime.store, locks=runtime.locks, publisher=runtime.publisher)


def _stop_session_use_case(request: Request) -> StopSession:
    runtime = _runtime(request)
    return StopSession(
        store=runtime.store,
        locks=runtime.locks,
        publisher=runtime.publisher,
        lights=runtime.lights,
        venue_timezone=runtime.venue_timezone,
    )


def _update_session_use_case(request: Request) -> UpdateSessionDetails:
    runtime = _runtime(request)
    return UpdateSessionDetails(
        store=runtime.store,
        locks=runtime.locks,
        publisher=runtime.publisher,
    )


@router.post(
    "/v1/tables/{table_id}/start",
    response_model=SessionTransitionResponse,
    status_code=status.HTTP_201_CREATED,
)
def start_session(
    table_id: int,
    request: Request,
    request_dto: StartSessionRequest | None = None,
) -> SessionTransitionResponse:
    return _start_session_use_case(request).execute(TableId(table_id), request_dto)


@router.post("/v1/tables/{table_id}/pause", response_model=SessionTransitionResponse)
def pause_session(table_id: int, request: Request) -> SessionTransitionResponse:
    return _pause_session_use_case(request).execute(TableId(table_id))


@router.post("/v1/tables/{table_id}/resume", response_model=SessionTransitionResponse)
def resume_session(table_id: int, request: Request) -> SessionTransitionResponse:
    return _resume_session_use_case(request).execute(TableId(table_id))


@router.post("/v1/tables/{table_id}/stop", response_model=StopSessionResponse)
def stop_session(
    table_id: int,
    request: Request,
    request_dto: StopSessionRequest | None = None,
) -> StopSessionResponse:
    return _stop_session_use_case(request).execute(TableId(table_id), request_dto)


@router.patch("/v1/sessions/{session_id}", response_model=SessionResponse)
def update_session(
    session_id: int,
    request_dto: SessionPatchRequest,
    request: Request,
) -> SessionResponse:
    return _update_session_use_case(request).execute(SessionId(session_id), request_dto)


@router.get("/v1/sessions", response_model=SessionHistoryResponse)
def list_sessions(
    request: Request,
    business_date: date | None = Query(default=None, alias="date"),
    customer_phone: str | None = Query(default=None, alias="customerPhone"),
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
) -> SessionHistoryResponse:
    runtime = _runtime(request)
    return ListSessions(store=runtime.store, venue_timezone=runtime.venue_timezone).execute(
        business_date=business_date,
        customer_phone=customer_phone,
        limit=limit,
        cursor=cursor,
    )
