from __future__ import annotations

import logging

from parlor.application.dto.requests import TableStatusRequest
from parlor.application.dto.responses import TableResponse
from parlor.application.errors import InvalidTransitionError
from parlor.application.mappers.table_mapper import to_table_response
from parlor.application.metrics.ledger import record_table_status_change
from parlor.application.use_cases.base import LedgerCommand
from parlor.domain.common.ids import TableId
from parlor.domain.events import EventType
from parlor.domain.table.entities import TableStatusTransitionError

logger = logging.getLogger(__name__)


class SetTableStatus(LedgerCommand):
    operation = "set_status"

    def execute(self, table_id: TableId, request_dto: TableStatusRequest) -> TableResponse:
        target = request_dto.status
        now = self._clock()

        with self._locked_transaction(table_id) as tx:
            table = self._require_table(tx, table_id, for_update=True)
            if tx.get_open_session(table_id) is not None:
                raise InvalidTransitionError(
                    f"table {table_id} has an open session",
                    details={"tableId": int(table_id), "target": target.value},
                )
            try:
                updated = table.set_status(target, now)
            except TableStatusTransitionError as exc:
                raise InvalidTransitionError(
                    str(exc),
                    details={"tableId": int(table_id), "target": target.value},
                ) from exc
            changed = updated != table
            if changed:
                tx.save_table(updated)

        response = to_table_response(updated)
        if not changed:
            return response

        record_table_status_change(updated.status.value)
        logger.info(
            "table_status_changed",
            extra={
                "table_id": table_id,
                "from_status": table.status.value,
                "to_status": updated.status.value,
            },
        )
        self._publish(EventType.TABLE_UPDATE, {"table": response.model_dump(mode="json")})
        if table.light_on and not updated.light_on:
            self._request_light(table_id, False)
        return response
