from __future__ import annotations

import logging

from parlor.application.dto.requests import SessionPatchRequest
from parlor.application.dto.responses import SessionResponse
from parlor.application.errors import (
    EmptySessionPatchError,
    InvalidTransitionError,
    SessionNotFoundError,
)
from parlor.application.mappers.session_mapper import to_session_response
from parlor.application.metrics.ledger import record_transition
from parlor.application.ports.repositories import LedgerTransaction
from parlor.application.use_cases.base import LedgerCommand
from parlor.domain.common.ids import SessionId
from parlor.domain.events import EventType
from parlor.domain.session.entities import Session, SessionPatchError

logger = logging.getLogger(__name__)


class UpdateSessionDetails(LedgerCommand):
    operation = "update_session"

    def execute(self, session_id: SessionId, request_dto: SessionPatchRequest) -> SessionResponse:
        changes = request_dto.changes()
        if not changes:
            raise EmptySessionPatchError("no editable fields supplied")

        with self._transaction() as tx:
            table_id = self._require_session(tx, session_id).table_id

        with self._locked_transaction(table_id) as tx:
            session = self._require_session(tx, session_id, for_update=True)
            try:
                updated = session.apply_patch(changes)
            except (SessionPatchError, ValueError) as exc:
                raise InvalidTransitionError(
                    str(exc),
                    details={"sessionId": int(session_id), "fields": sorted(changes)},
                ) from exc
            tx.save_session(updated)

        record_transition("update")
        logger.info(
            "session_updated",
            extra={"session_id": session_id, "fields": sorted(changes)},
        )
        response = to_session_response(updated)
        self._publish(EventType.SESSION_UPDATE, {"session": response.model_dump(mode="json")})
        return response

    def _require_session(
        self,
        tx: LedgerTransaction,
        session_id: SessionId,
        *,
        for_update: bool = False,
    ) -> Session:
        session = tx.get_session(session_id, for_update=for_update)
        if session is None:
            raise SessionNotFoundError(
                f"session not found for session_id={session_id}",
                details={"sessionId": int(session_id)},
            )
        return session
