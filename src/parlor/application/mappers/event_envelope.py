from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from parlor.application.realtime.broadcaster import BroadcastEvent


def serialize_event(event: BroadcastEvent) -> str:
    envelope = {
        "type": event.type,
        "payload": event.payload,
        "timestamp": event.timestamp.isoformat(),
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False, default=str)


def serialize_sse(event: BroadcastEvent) -> str:
    return f"event: {event.type}\ndata: {serialize_event(event)}\n\n"


def parse_event(raw: str) -> BroadcastEvent:
    envelope: dict[str, Any] = json.loads(raw)
    event_type = envelope.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise ValueError("event envelope is missing a type")
    payload = envelope.get("payload") or {}
    if not isinstance(payload, dict):
        raise ValueError("event payload must be an object")
    timestamp_raw = envelope.get("timestamp")
    timestamp = (
        datetime.fromisoformat(timestamp_raw)
        if isinstance(timestamp_raw, str)
        else datetime.now(timezone.utc)
    )
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return BroadcastEvent(type=event_type, payload=payload, timestamp=timestamp)
