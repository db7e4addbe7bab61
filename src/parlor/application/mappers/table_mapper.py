from __future__ import annotations

from parlor.application.dto.responses import TableResponse
from parlor.domain.table.entities import Table


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableId=int(table.table_id),
        category=table.category.value,
        hourlyRate=table.hourly_rate,
        status=table.status.value,
        lightOn=table.light_on,
        lastMaintenanceAt=table.last_maintenance_at,
    )
