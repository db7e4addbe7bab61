from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    TABLE_UPDATE = "table:update"
    SESSION_START = "session:start"
    SESSION_PAUSE = "session:pause"
    SESSION_RESUME = "session:resume"
    SESSION_STOP = "session:stop"
    SESSION_UPDATE = "session:update"
    CONNECTED = "connected"
    HEARTBEAT = "heartbeat"
