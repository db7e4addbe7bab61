from __future__ import annotations

import logging

from parlor.application.dto.requests import StartSessionRequest
from parlor.application.dto.responses import SessionTransitionResponse
from parlor.application.errors import TableBusyError, TableUnderMaintenanceError
from parlor.application.mappers.session_mapper import to_session_response
from parlor.application.mappers.table_mapper import to_table_response
from parlor.application.metrics.ledger import record_transition
from parlor.application.use_cases.base import LedgerCommand
from parlor.domain.common.ids import TableId
from parlor.domain.events import EventType
from parlor.domain.session.entities import UNASSIGNED_SESSION_ID, Session
from parlor.domain.table.entities import TableInMaintenanceError, TableOccupiedError

logger = logging.getLogger(__name__)


class StartSession(LedgerCommand):
    operation = "start"

    def execute(
        self,
        table_id: TableId,
        request_dto: StartSessionRequest | None = None,
    ) -> SessionTransitionResponse:
        options = request_dto or StartSessionRequest()
        now = self._clock()

        with self._locked_transaction(table_id) as tx:
            table = self._require_table(tx, table_id, for_update=True)
            try:
                occupied = table.occupy(light_on=options.light)
            except TableOccupiedError as exc:
                raise TableBusyError(str(exc), details={"tableId": int(table_id)}) from exc
            except TableInMaintenanceError as exc:
                raise TableUnderMaintenanceError(
                    str(exc), details={"tableId": int(table_id)}
                ) from exc

            if tx.get_open_session(table_id) is not None:
                raise TableBusyError(
                    f"table {table_id} already has an open session",
                    details={"tableId": int(table_id)},
                )

            session = tx.add_session(
                Session(
                    session_id=UNASSIGNED_SESSION_ID,
                    table_id=table_id,
                    start_time=now,
                    active_since=now,
                    is_friendly=options.is_friendly,
                    discount_percent=options.discount_percent,
                    payment_method=options.payment_method,
                    customer_name=options.customer_name,
                    customer_phone=options.customer_phone,
                    notes=options.notes,
                )
            )
            tx.save_table(occupied)

        record_transition("start")
        logger.info(
            "session_started",
            extra={"table_id": table_id, "session_id": session.session_id},
        )
        response = SessionTransitionResponse(
            table=to_table_response(occupied),
            session=to_session_response(session),
        )
        self._publish(EventType.SESSION_START, response.model_dump(mode="json"))
        if options.light:
            self._request_light(table_id, True)
        return response
