from __future__ import annotations

import logging
import os

import httpx

from parlor.application.ports.hardware import LightControlError, LightController
from parlor.domain.common.ids import TableId

logger = logging.getLogger(__name__)


class HttpLightController(LightController):
    """POSTs to the venue light controller: {base_url}/light/{table_id}/on|off."""

    def __init__(self, base_url: str, timeout_seconds: float = 3.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def set_light(self, table_id: TableId, on: bool) -> None:
        url = f"{self._base_url}/light/{int(table_id)}/{'on' if on else 'off'}"
        try:
            with httpx.Client(timeout=self._timeout_seconds) as client:
                response = client.post(url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise LightControlError(f"light request failed for table {table_id}: {exc}") from exc


class NoopLightController(LightController):
    def set_light(self, table_id: TableId, on: bool) -> None:
        logger.debug("light_control_disabled", extra={"table_id": table_id, "on": on})


def build_light_controller() -> LightController:
    if os.getenv("HARDWARE_ENABLED", "false").lower() != "true":
        return NoopLightController()
    base_url = os.getenv("HARDWARE_BASE_URL")
    if not base_url:
        logger.warning(
            "light_control_not_configured",
            extra={"reason": "HARDWARE_BASE_URL missing"},
        )
        return NoopLightController()
    timeout_seconds = float(os.getenv("HARDWARE_TIMEOUT_SECONDS", "3"))
    return HttpLightController(base_url=base_url, timeout_seconds=timeout_seconds)
