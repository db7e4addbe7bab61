from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from parlor.domain.session.entities import PaymentMethod
from parlor.domain.table.entities import TableCategory


@dataclass(frozen=True)
class DailyCompletion:
    business_date: date
    category: TableCategory
    payment_method: PaymentMethod
    amount: int
    is_friendly: bool


@dataclass(frozen=True)
class DailyAggregate:
    business_date: date
    total_amount: int = 0
    session_count: int = 0
    friendly_count: int = 0
    category_totals: dict[TableCategory, int] = field(default_factory=dict)
    payment_method_totals: dict[PaymentMethod, int] = field(default_factory=dict)

    def record_completion(self, completion: DailyCompletion) -> DailyAggregate:
        if completion.business_date != self.business_date:
            raise ValueError("completion belongs to a different business date")
        if completion.amount < 0:
            raise ValueError("completion amount must not be negative")
        category_totals = dict(self.category_totals)
        category_totals[completion.category] = (
            category_totals.get(completion.category, 0) + completion.amount
        )
        payment_totals = dict(self.payment_method_totals)
        payment_totals[completion.payment_method] = (
            payment_totals.get(completion.payment_method, 0) + completion.amount
        )
        return replace(
            self,
            total_amount=self.total_amount + completion.amount,
            session_count=self.session_count + 1,
            friendly_count=self.friendly_count + (1 if completion.is_friendly else 0),
            category_totals=category_totals,
            payment_method_totals=payment_totals,
        )


def venue_zone(tz_name: str) -> tzinfo:
    if tz_name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown venue timezone: {tz_name!r}") from exc


def local_business_date(moment: datetime, tz_name: str = "UTC") -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(venue_zone(tz_name)).date()


def business_day_bounds(business_date: date, tz_name: str = "UTC") -> tuple[datetime, datetime]:
    """UTC half-open window [start, end) covering one local business date."""
    zone = venue_zone(tz_name)
    start = datetime.combine(business_date, time.min, tzinfo=zone)
    end = datetime.combine(business_date + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
