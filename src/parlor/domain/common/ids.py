from __future__ import annotations

from typing import NewType

TableId = NewType("TableId", int)
SessionId = NewType("SessionId", int)
