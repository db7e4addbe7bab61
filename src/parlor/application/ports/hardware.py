from __future__ import annotations

from typing import Protocol

from parlor.domain.common.ids import TableId


class LightController(Protocol):
    def set_light(self, table_id: TableId, on: bool) -> None: ...


class LightControlError(Exception):
    pass
