from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState

from parlor.application.mappers.event_envelope import serialize_event
from parlor.application.realtime.broadcaster import Broadcaster, Subscription

router = APIRouter()
logger = logging.getLogger(__name__)


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    async for event in subscription.stream():
        await websocket.send_text(serialize_event(event))


async def _drain_client(websocket: WebSocket) -> None:
    while True:
        await websocket.receive_text()


def _log_failure(task: asyncio.Task[None], subscription: Subscription) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None or isinstance(exc, WebSocketDisconnect):
        return
    logger.error(
        "ws_connection_error",
        exc_info=exc,
        extra={"subscriber_id": subscription.subscriber_id},
    )


def _connected(websocket: WebSocket) -> bool:
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    broadcaster: Broadcaster = websocket.app.state.broadcaster
    await websocket.accept()
    subscription = broadcaster.subscribe()
    sender = asyncio.create_task(_forward(websocket, subscription))
    receiver = asyncio.create_task(_drain_client(websocket))
    try:
        done, pending = await asyncio.wait(
            {sender, receiver},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        for task in done:
            _log_failure(task, subscription)
        # the broadcaster dropped this subscriber; the client should reconnect
        if sender in done and _connected(websocket):
            logger.info(
                "ws_subscription_dropped",
                extra={"subscriber_id": subscription.subscriber_id},
            )
            await websocket.close(code=1011, reason="subscription dropped")
    finally:
        sender.cancel()
        receiver.cancel()
        broadcaster.unsubscribe(subscription)
