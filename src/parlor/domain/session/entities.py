from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from parlor.domain.common.ids import SessionId, TableId


class PaymentMethod(str, Enum):
    CASH = "CASH"
    UPI = "UPI"
    CARD = "CARD"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


UNASSIGNED_SESSION_ID = SessionId(0)

DESCRIPTIVE_FIELDS = frozenset({"customer_name", "customer_phone", "notes"})
BILLING_FIELDS = frozenset({"payment_method", "discount_percent", "is_friendly"})


def elapsed_between(start: datetime, end: datetime) -> int:
    delta = end - start
    ms = delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000
    return max(ms, 0)


@dataclass(frozen=True)
class Session:
    session_id: SessionId
    table_id: TableId
    start_time: datetime
    end_time: datetime | None = None
    accumulated_ms: int = 0
    active_since: datetime | None = None
    break_count: int = 0
    is_friendly: bool = False
    discount_percent: int = 0
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PENDING
    billed_minutes: int | None = None
    amount: int | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.discount_percent <= 100:
            raise ValueError("discount_percent must be between 0 and 100")
        if self.accumulated_ms < 0:
            raise ValueError("accumulated_ms must not be negative")
        if self.end_time is not None and self.active_since is not None:
            raise ValueError("closed session cannot have an active stretch")

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    @property
    def is_paused(self) -> bool:
        return self.is_open and self.active_since is None

    def pause(self, now: datetime) -> Session:
        if self.active_since is None:
            raise SessionAlreadyPausedError(f"session {self.session_id} is already paused")
        return replace(
            self,
            accumulated_ms=self.accumulated_ms + elapsed_between(self.active_since, now),
            active_since=None,
            break_count=self.break_count + 1,
        )

    def resume(self, now: datetime) -> Session:
        if self.active_since is not None:
            raise SessionNotPausedError(f"session {self.session_id} is not paused")
        return replace(self, active_since=now)

    def close(
        self,
        now: datetime,
        *,
        billed_minutes: int,
        amount: int,
        payment_method: PaymentMethod,
        discount_percent: int,
    ) -> Session:
        if not self.is_open:
            raise SessionClosedError(f"session {self.session_id} is already closed")
        accumulated = self.accumulated_ms
        if self.active_since is not None:
            accumulated += elapsed_between(self.active_since, now)
        return replace(
            self,
            end_time=now,
            accumulated_ms=accumulated,
            active_since=None,
            billed_minutes=billed_minutes,
            amount=amount,
            payment_method=payment_method,
            discount_percent=discount_percent,
            payment_status=PaymentStatus.PAID,
        )

    def apply_patch(self, changes: dict[str, object]) -> Session:
        unknown = set(changes) - DESCRIPTIVE_FIELDS - BILLING_FIELDS
        if unknown:
            raise SessionPatchError(f"fields not editable: {', '.join(sorted(unknown))}")
        if not self.is_open:
            locked = set(changes) & BILLING_FIELDS
            if locked:
                raise SessionPatchError(
                    f"billing fields of closed session {self.session_id} are final: "
                    f"{', '.join(sorted(locked))}"
                )
        return replace(self, **changes)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Active:
    session: Session


@dataclass(frozen=True)
class Paused:
    session: Session


Occupancy = Idle | Active | Paused


def occupancy_of(session: Session | None) -> Occupancy:
    if session is None or not session.is_open:
        return Idle()
    if session.active_since is None:
        return Paused(session)
    return Active(session)


class SessionAlreadyPausedError(Exception):
    pass


class SessionNotPausedError(Exception):
    pass


class SessionClosedError(Exception):
    pass


class SessionPatchError(Exception):
    pass
