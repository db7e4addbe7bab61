from __future__ import annotations

import logging

from parlor.application.dto.responses import SessionTransitionResponse
from parlor.application.errors import AlreadyPausedError, NotPausedError
from parlor.application.mappers.session_mapper import to_session_response
from parlor.application.mappers.table_mapper import to_table_response
from parlor.application.metrics.ledger import record_transition
from parlor.application.use_cases.base import LedgerCommand
from parlor.domain.common.ids import TableId
from parlor.domain.events import EventType
from parlor.domain.session.entities import (
    Active,
    Paused,
    SessionAlreadyPausedError,
    SessionNotPausedError,
    occupancy_of,
)

logger = logging.getLogger(__name__)


class PauseSession(LedgerCommand):
    operation = "pause"

    def execute(self, table_id: TableId) -> SessionTransitionResponse:
        now = self._clock()
        with self._locked_transaction(table_id) as tx:
            table = self._require_table(tx, table_id, for_update=True)
            session = self._require_open_session(tx, table)
            if isinstance(occupancy_of(session), Paused):
                raise AlreadyPausedError(
                    f"session {session.session_id} is already paused",
                    details={"tableId": int(table_id), "sessionId": int(session.session_id)},
                )
            try:
                paused = session.pause(now)
            except SessionAlreadyPausedError as exc:
                raise AlreadyPausedError(str(exc)) from exc
            tx.save_session(paused)

        record_transition("pause")
        logger.info(
            "session_paused",
            extra={
                "table_id": table_id,
                "session_id": paused.session_id,
                "accumulated_ms": paused.accumulated_ms,
            },
        )
        response = SessionTransitionResponse(
            table=to_table_response(table),
            session=to_session_response(paused),
        )
        self._publish(EventType.SESSION_PAUSE, response.model_dump(mode="json"))
        return response


class ResumeSession(LedgerCommand):
    operation = "resume"

    def execute(self, table_id: TableId) -> SessionTransitionResponse:
        now = self._clock()
        with self._locked_transaction(table_id) as tx:
            table = self._require_table(tx, table_id, for_update=True)
            session = self._require_open_session(tx, table)
            if isinstance(occupancy_of(session), Active):
                raise NotPausedError(
                    f"session {session.session_id} is not paused",
                    details={"tableId": int(table_id), "sessionId": int(session.session_id)},
                )
            try:
                resumed = session.resume(now)
            except SessionNotPausedError as exc:
                raise NotPausedError(str(exc)) from exc
            tx.save_session(resumed)

        record_transition("resume")
        logger.info(
            "session_resumed",
            extra={"table_id": table_id, "session_id": resumed.session_id},
        )
        response = SessionTransitionResponse(
            table=to_table_response(table),
            session=to_session_response(resumed),
        )
        self._publish(EventType.SESSION_RESUME, response.model_dump(mode="json"))
        return response
