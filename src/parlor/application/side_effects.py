from __future__ import annotations

import logging
import threading
import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone

from parlor.application.metrics.ledger import record_light_request
from parlor.application.ports.hardware import LightController
from parlor.domain.common.ids import TableId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LightDiagnostic:
    table_id: TableId
    action: str
    ok: bool
    duration_ms: float
    error: str | None
    recorded_at: datetime


class LightDispatcher:
    """Runs light requests off the command path; failures become diagnostics only."""

    def __init__(
        self,
        controller: LightController,
        *,
        max_workers: int = 2,
        diagnostics_size: int = 100,
    ) -> None:
        self._controller = controller
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="parlor-light",
        )
        self._diagnostics: deque[LightDiagnostic] = deque(maxlen=diagnostics_size)
        self._diagnostics_lock = threading.Lock()

    def request(self, table_id: TableId, on: bool) -> Future[None] | None:
        try:
            return self._executor.submit(self._run, table_id, on)
        except RuntimeError:
            logger.warning(
                "light_request_dropped",
                extra={"table_id": table_id, "action": _action(on)},
            )
            return None

    def diagnostics(self) -> list[LightDiagnostic]:
        with self._diagnostics_lock:
            return list(self._diagnostics)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _run(self, table_id: TableId, on: bool) -> None:
        action = _action(on)
        started = time.perf_counter()
        error: str | None = None
        try:
            self._controller.set_light(table_id, on)
        except Exception as exc:
            error = f"{type(exc).__name__}: {exc}"
        duration_seconds = time.perf_counter() - started
        outcome = "ok" if error is None else "failed"
        record_light_request(action=action, outcome=outcome, duration_seconds=duration_seconds)

        diagnostic = LightDiagnostic(
            table_id=table_id,
            action=action,
            ok=error is None,
            duration_ms=round(duration_seconds * 1000, 2),
            error=error,
            recorded_at=datetime.now(timezone.utc),
        )
        with self._diagnostics_lock:
            self._diagnostics.append(diagnostic)

        if error is None:
            logger.info(
                "light_request_complete",
                extra={
                    "table_id": table_id,
                    "action": action,
                    "duration_ms": diagnostic.duration_ms,
                },
            )
        else:
            logger.warning(
                "light_request_failed",
                extra={"table_id": table_id, "action": action, "error": error},
            )


def _action(on: bool) -> str:
    return "light_on" if on else "light_off"
