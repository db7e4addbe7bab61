from __future__ import annotations

from datetime import datetime

from parlor.application.dto.responses import (
    ReceiptResponse,
    RunningAmountResponse,
    SessionResponse,
)
from parlor.domain.billing.calculator import BillingQuote, format_duration, quote
from parlor.domain.common.ids import TableId
from parlor.domain.session.entities import Session
from parlor.domain.table.entities import Table


def to_session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        sessionId=int(session.session_id),
        tableId=int(session.table_id),
        startTime=session.start_time,
        endTime=session.end_time,
        accumulatedMs=session.accumulated_ms,
        activeSince=session.active_since,
        paused=session.is_paused,
        breakCount=session.break_count,
        isFriendly=session.is_friendly,
        discountPercent=session.discount_percent,
        paymentMethod=session.payment_method.value,
        paymentStatus=session.payment_status.value,
        billedMinutes=session.billed_minutes,
        amount=session.amount,
        customerName=session.customer_name,
        customerPhone=session.customer_phone,
        notes=session.notes,
    )


def to_running_amount_response(
    table: Table,
    session: Session | None,
    now: datetime,
) -> RunningAmountResponse:
    if session is None or not session.is_open:
        return idle_running_amount(table.table_id)
    billing = quote(table, session, now)
    return RunningAmountResponse(
        tableId=int(table.table_id),
        sessionId=int(session.session_id),
        amount=billing.amount,
        billedMinutes=billing.billed_minutes,
        elapsedMs=billing.elapsed_ms,
        duration=format_duration(billing.elapsed_ms),
        paused=session.is_paused,
    )


def idle_running_amount(table_id: TableId) -> RunningAmountResponse:
    return RunningAmountResponse(
        tableId=int(table_id),
        amount=0,
        billedMinutes=0,
        elapsedMs=0,
        duration=format_duration(0),
    )


def to_receipt_response(table: Table, session: Session, billing: BillingQuote) -> ReceiptResponse:
    return ReceiptResponse(
        amount=billing.amount,
        duration=format_duration(billing.elapsed_ms),
        minutes=billing.billed_minutes,
        hourlyRate=table.hourly_rate,
        discountPercent=session.discount_percent or None,
    )
