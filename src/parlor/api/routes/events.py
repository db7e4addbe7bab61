from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from parlor.application.mappers.event_envelope import serialize_sse
from parlor.application.realtime.broadcaster import Broadcaster

router = APIRouter()
logger = logging.getLogger(__name__)

SSE_RETRY_MS = 3000


async def _event_stream(broadcaster: Broadcaster, request: Request) -> AsyncIterator[str]:
    subscription = broadcaster.subscribe()
    try:
        yield f"retry: {SSE_RETRY_MS}\n\n"
        async for event in subscription.stream():
            if await request.is_disconnected():
                break
            yield serialize_sse(event)
    finally:
        broadcaster.unsubscribe(subscription)


@router.get("/v1/events")
async def stream_events(request: Request) -> StreamingResponse:
    """Server-Sent Events: `connected` first, then every ledger event and heartbeats."""
    return StreamingResponse(
        _event_stream(request.app.state.broadcaster, request),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
