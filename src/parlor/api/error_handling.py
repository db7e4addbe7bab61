from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from parlor.api.middleware.request_id import get_request_id
from parlor.application.errors import (
    AlreadyPausedError,
    EmptySessionPatchError,
    InvalidSessionHistoryCursorError,
    InvalidSessionHistoryLimitError,
    InvalidTransitionError,
    LedgerError,
    NoActiveSessionError,
    NotPausedError,
    SessionNotFoundError,
    StorageFailureError,
    TableBusyError,
    TableNotFoundError,
    TableUnderMaintenanceError,
)


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
        headers=headers,
    )


def _ledger_exception_handler(status_code: int):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        ledger_exc = cast(LedgerError, exc)
        headers = {"Retry-After": "1"} if getattr(ledger_exc, "retryable", False) else None
        return _error_response(
            status_code=status_code,
            code=ledger_exc.code,
            message=str(ledger_exc),
            details=ledger_exc.details,
            headers=headers,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    elif http_exc.status_code == 409:
        code = "CONFLICT"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": jsonable_encoder(validation_exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[LedgerError], int]] = [
        (TableNotFoundError, 404),
        (SessionNotFoundError, 404),
        (TableBusyError, 409),
        (TableUnderMaintenanceError, 409),
        (NoActiveSessionError, 409),
        (AlreadyPausedError, 409),
        (NotPausedError, 409),
        (InvalidTransitionError, 409),
        (InvalidSessionHistoryCursorError, 400),
        (InvalidSessionHistoryLimitError, 400),
        (EmptySessionPatchError, 400),
        (StorageFailureError, 503),
    ]

    for exc_cls, status_code in mappings:
        app.add_exception_handler(exc_cls, _ledger_exception_handler(status_code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
