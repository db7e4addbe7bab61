from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from parlor.domain.common.ids import TableId


class TableCategory(str, Enum):
    ENGLISH = "ENGLISH"
    FRENCH = "FRENCH"


class TableStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"


_MANUAL_STATUSES = frozenset({TableStatus.AVAILABLE, TableStatus.MAINTENANCE})


@dataclass(frozen=True)
class Table:
    table_id: TableId
    category: TableCategory
    hourly_rate: int
    status: TableStatus
    light_on: bool = False
    last_maintenance_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.hourly_rate <= 0:
            raise ValueError("hourly_rate must be positive")

    def occupy(self, light_on: bool = True) -> Table:
        if self.status == TableStatus.OCCUPIED:
            raise TableOccupiedError(f"table {self.table_id} is occupied")
        if self.status == TableStatus.MAINTENANCE:
            raise TableInMaintenanceError(f"table {self.table_id} is under maintenance")
        return replace(self, status=TableStatus.OCCUPIED, light_on=light_on)

    def release(self) -> Table:
        return replace(self, status=TableStatus.AVAILABLE, light_on=False)

    def set_status(self, target: TableStatus, now: datetime) -> Table:
        """Manual status change; only AVAILABLE <-> MAINTENANCE is allowed."""
        if target not in _MANUAL_STATUSES:
            raise TableStatusTransitionError(
                f"status {target.value} cannot be set manually on table {self.table_id}"
            )
        if self.status == TableStatus.OCCUPIED:
            raise TableStatusTransitionError(
                f"table {self.table_id} has an open session"
            )
        if target == self.status:
            return self
        if target == TableStatus.MAINTENANCE:
            return replace(self, status=target, light_on=False, last_maintenance_at=now)
        return replace(self, status=target)


class TableOccupiedError(Exception):
    pass


class TableInMaintenanceError(Exception):
    pass


class TableStatusTransitionError(Exception):
    pass
