from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query, Request

from parlor.api.runtime import LedgerRuntime
from parlor.application.dto.responses import DailySummaryResponse
from parlor.application.use_cases.daily_summary import GetDailySummary

router = APIRouter()


@router.get("/v1/summary/daily", response_model=DailySummaryResponse)
def get_daily_summary(
    request: Request,
    business_date: date | None = Query(default=None, alias="date"),
) -> DailySummaryResponse:
    runtime: LedgerRuntime = request.app.state.ledger
    return GetDailySummary(
        store=runtime.store,
        venue_timezone=runtime.venue_timezone,
    ).execute(business_date)
