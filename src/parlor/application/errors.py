from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    code = "LEDGER_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class TableNotFoundError(LedgerError):
    code = "TABLE_NOT_FOUND"


class SessionNotFoundError(LedgerError):
    code = "SESSION_NOT_FOUND"


class TableBusyError(LedgerError):
    code = "TABLE_BUSY"


class TableUnderMaintenanceError(LedgerError):
    code = "TABLE_UNDER_MAINTENANCE"


class NoActiveSessionError(LedgerError):
    code = "NO_ACTIVE_SESSION"


class AlreadyPausedError(LedgerError):
    code = "ALREADY_PAUSED"


class NotPausedError(LedgerError):
    code = "NOT_PAUSED"


class InvalidTransitionError(LedgerError):
    code = "INVALID_TRANSITION"


class InvalidSessionHistoryCursorError(LedgerError):
    code = "INVALID_CURSOR"


class InvalidSessionHistoryLimitError(LedgerError):
    code = "INVALID_LIMIT"


class StorageFailureError(LedgerError):
    code = "STORAGE_FAILURE"
    retryable = True


class EmptySessionPatchError(LedgerError):
    code = "EMPTY_SESSION_PATCH"
