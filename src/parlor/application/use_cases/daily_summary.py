from __future__ import annotations

from datetime import date

from parlor.application.dto.responses import DailySummaryResponse
from parlor.application.ports.repositories import LedgerStore
from parlor.application.use_cases.base import Clock, LedgerQuery
from parlor.domain.billing.calculator import quote
from parlor.domain.daily.entities import DailyAggregate, local_business_date


class GetDailySummary(LedgerQuery):
    operation = "daily_summary"

    def __init__(
        self,
        store: LedgerStore,
        clock: Clock | None = None,
        venue_timezone: str = "UTC",
    ) -> None:
        super().__init__(store, clock)
        self._venue_timezone = venue_timezone

    def execute(self, business_date: date | None = None) -> DailySummaryResponse:
        now = self._clock()
        today = local_business_date(now, self._venue_timezone)
        target = business_date or today

        active_sessions = 0
        active_amount = 0
        with self._transaction() as tx:
            aggregate = tx.get_daily(target) or DailyAggregate(business_date=target)
            if target == today:
                tables = {table.table_id: table for table in tx.list_tables()}
                for session in tx.list_open_sessions():
                    table = tables.get(session.table_id)
                    if table is None:
                        continue
                    active_sessions += 1
                    active_amount += quote(table, session, now).amount

        return DailySummaryResponse(
            businessDate=aggregate.business_date,
            totalAmount=aggregate.total_amount,
            sessionCount=aggregate.session_count,
            friendlyCount=aggregate.friendly_count,
            categoryTotals={
                category.value: amount for category, amount in aggregate.category_totals.items()
            },
            paymentMethodTotals={
                method.value: amount
                for method, amount in aggregate.payment_method_totals.items()
            },
            activeSessions=active_sessions,
            activeAmount=active_amount,
            projectedAmount=aggregate.total_amount + active_amount,
        )
