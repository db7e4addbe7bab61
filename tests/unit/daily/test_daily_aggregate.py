from __future__ import annotations

import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from parlor.domain.daily.entities import (
    DailyAggregate,
    DailyCompletion,
    local_business_date,
    venue_zone,
)
from parlor.domain.session.entities import PaymentMethod
from parlor.domain.table.entities import TableCategory

DAY = date(2026, 3, 14)


def _completion(amount: int, **overrides) -> DailyCompletion:
    values = {
        "business_date": DAY,
        "category": TableCategory.ENGLISH,
        "payment_method": PaymentMethod.CASH,
        "amount": amount,
        "is_friendly": False,
    }
    values.update(overrides)
    return DailyCompletion(**values)


def test_record_completion_adds_to_totals_and_breakdowns() -> None:
    aggregate = DailyAggregate(business_date=DAY)
    aggregate = aggregate.record_completion(_completion(150))
    aggregate = aggregate.record_completion(
        _completion(80, category=TableCategory.FRENCH, payment_method=PaymentMethod.UPI)
    )
    aggregate = aggregate.record_completion(_completion(0, is_friendly=True))

    assert aggregate.total_amount == 230
    assert aggregate.session_count == 3
    assert aggregate.friendly_count == 1
    assert aggregate.category_totals == {TableCategory.ENGLISH: 150, TableCategory.FRENCH: 80}
    assert aggregate.payment_method_totals == {PaymentMethod.CASH: 150, PaymentMethod.UPI: 80}


def test_record_completion_rejects_other_dates() -> None:
    with pytest.raises(ValueError):
        DailyAggregate(business_date=DAY).record_completion(
            _completion(10, business_date=date(2026, 3, 15))
        )


def test_business_date_uses_venue_timezone() -> None:
    late_evening_utc = datetime(2026, 3, 14, 20, 0, 0, tzinfo=timezone.utc)

    assert local_business_date(late_evening_utc) == date(2026, 3, 14)
    assert local_business_date(late_evening_utc, "Asia/Kolkata") == date(2026, 3, 15)


def test_unknown_venue_timezone_is_rejected() -> None:
    assert venue_zone("utc") == timezone.utc

    with pytest.raises(ValueError, match="Mars/Olympus_Mons"):
        venue_zone("Mars/Olympus_Mons")
