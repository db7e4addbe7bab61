from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class TableResponse(BaseModel):
    tableId: int
    category: str
    hourlyRate: int
    status: str
    lightOn: bool
    lastMaintenanceAt: datetime | None = None


class SessionResponse(BaseModel):
    sessionId: int
    tableId: int
    startTime: datetime
    endTime: datetime | None = None
    accumulatedMs: int
    activeSince: datetime | None = None
    paused: bool
    breakCount: int
    isFriendly: bool
    discountPercent: int
    paymentMethod: str
    paymentStatus: str
    billedMinutes: int | None = None
    amount: int | None = None
    customerName: str | None = None
    customerPhone: str | None = None
    notes: str | None = None


class RunningAmountResponse(BaseModel):
    tableId: int
    sessionId: int | None = None
    amount: int
    billedMinutes: int
    elapsedMs: int
    duration: str
    paused: bool = False


class TableDetailResponse(BaseModel):
    table: TableResponse
    session: SessionResponse | None = None
    running: RunningAmountResponse


class TableListResponse(BaseModel):
    tables: list[TableDetailResponse] = Field(default_factory=list)


class SessionTransitionResponse(BaseModel):
    table: TableResponse
    session: SessionResponse


class ReceiptResponse(BaseModel):
    amount: int
    duration: str
    minutes: int
    hourlyRate: int
    discountPercent: int | None = None


class StopSessionResponse(BaseModel):
    table: TableResponse
    session: SessionResponse
    receipt: ReceiptResponse


class SessionHistoryResponse(BaseModel):
    sessions: list[SessionResponse] = Field(default_factory=list)
    nextCursor: str | None = None


class DailySummaryResponse(BaseModel):
    businessDate: date
    totalAmount: int
    sessionCount: int
    friendlyCount: int
    categoryTotals: dict[str, int] = Field(default_factory=dict)
    paymentMethodTotals: dict[str, int] = Field(default_factory=dict)
    activeSessions: int = 0
    activeAmount: int = 0
    projectedAmount: int
