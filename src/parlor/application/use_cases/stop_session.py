from __future__ import annotations

import logging

from parlor.application.dto.requests import StopSessionRequest
from parlor.application.dto.responses import StopSessionResponse
from parlor.application.locks import TableLockRegistry
from parlor.application.mappers.session_mapper import to_receipt_response, to_session_response
from parlor.application.mappers.table_mapper import to_table_response
from parlor.application.metrics.ledger import record_session_closed, record_transition
from parlor.application.ports.publisher import EventPublisher
from parlor.application.ports.repositories import LedgerStore
from parlor.application.side_effects import LightDispatcher
from parlor.application.use_cases.base import Clock, LedgerCommand
from parlor.domain.billing.calculator import quote
from parlor.domain.common.ids import TableId
from parlor.domain.daily.entities import DailyCompletion, local_business_date
from parlor.domain.events import EventType

logger = logging.getLogger(__name__)


class StopSession(LedgerCommand):
    operation = "stop"

    def __init__(
        self,
        store: LedgerStore,
        locks: TableLockRegistry,
        publisher: EventPublisher,
        lights: LightDispatcher | None = None,
        clock: Clock | None = None,
        venue_timezone: str = "UTC",
    ) -> None:
        super().__init__(store, locks, publisher, lights=lights, clock=clock)
        self._venue_timezone = venue_timezone

    def execute(
        self,
        table_id: TableId,
        request_dto: StopSessionRequest | None = None,
    ) -> StopSessionResponse:
        options = request_dto or StopSessionRequest()
        now = self._clock()

        with self._locked_transaction(table_id) as tx:
            table = self._require_table(tx, table_id, for_update=True)
            session = self._require_open_session(tx, table)

            payment_method = options.payment_method or session.payment_method
            discount_percent = (
                session.discount_percent
                if options.discount_percent is None
                else options.discount_percent
            )
            billing = quote(table, session, now, discount_percent=discount_percent)
            closed = session.close(
                now,
                billed_minutes=billing.billed_minutes,
                amount=billing.amount,
                payment_method=payment_method,
                discount_percent=discount_percent,
            )
            released = table.release()

            tx.save_session(closed)
            tx.save_table(released)
            tx.record_completion(
                DailyCompletion(
                    business_date=local_business_date(now, self._venue_timezone),
                    category=table.category,
                    payment_method=payment_method,
                    amount=billing.amount,
                    is_friendly=closed.is_friendly,
                )
            )

        record_transition("stop")
        record_session_closed(
            category=table.category.value,
            payment_method=payment_method.value,
            amount=billing.amount,
            billed_minutes=billing.billed_minutes,
        )
        logger.info(
            "session_stopped",
            extra={
                "table_id": table_id,
                "session_id": closed.session_id,
                "billed_minutes": billing.billed_minutes,
                "amount": billing.amount,
            },
        )
        response = StopSessionResponse(
            table=to_table_response(released),
            session=to_session_response(closed),
            receipt=to_receipt_response(table, closed, billing),
        )
        self._publish(EventType.SESSION_STOP, response.model_dump(mode="json"))
        self._request_light(table_id, False)
        return response
