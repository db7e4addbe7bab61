from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from parlor.domain.session.entities import Session, elapsed_between
from parlor.domain.table.entities import Table

MS_PER_MINUTE = 60_000


@dataclass(frozen=True)
class BillingQuote:
    amount: int
    billed_minutes: int
    elapsed_ms: int


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def elapsed_ms(session: Session, now: datetime) -> int:
    total = session.accumulated_ms
    if session.active_since is not None:
        total += elapsed_between(session.active_since, now)
    return max(total, 0)


def billed_minutes(elapsed: int) -> int:
    if elapsed <= 0:
        return 0
    return -(-elapsed // MS_PER_MINUTE)


def compute_amount(
    hourly_rate: int,
    minutes: int,
    discount_percent: int,
    is_friendly: bool,
) -> int:
    """Integer-only pricing: base rounds half-up, then the discount rounds half-up."""
    if is_friendly:
        return 0
    base = _round_half_up(minutes * hourly_rate, 60)
    discount = _round_half_up(base * discount_percent, 100)
    return base - discount


def quote(
    table: Table,
    session: Session,
    now: datetime,
    *,
    discount_percent: int | None = None,
) -> BillingQuote:
    elapsed = elapsed_ms(session, now)
    minutes = billed_minutes(elapsed)
    discount = session.discount_percent if discount_percent is None else discount_percent
    return BillingQuote(
        amount=compute_amount(table.hourly_rate, minutes, discount, session.is_friendly),
        billed_minutes=minutes,
        elapsed_ms=elapsed,
    )


def format_duration(elapsed: int) -> str:
    minutes = max(elapsed, 0) // MS_PER_MINUTE
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"
