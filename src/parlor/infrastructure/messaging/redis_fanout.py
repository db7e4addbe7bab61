from __future__ import annotations

import asyncio
import logging
import os

from redis import asyncio as redis_asyncio

from parlor.application.mappers.event_envelope import parse_event
from parlor.application.realtime.broadcaster import Broadcaster
from parlor.infrastructure.messaging.redis_publisher import EVENTS_CHANNEL

logger = logging.getLogger(__name__)


def _decode_value(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


async def start_redis_fanout(broadcaster: Broadcaster, channel: str = EVENTS_CHANNEL) -> None:
    """Relay events published by any worker into this process's broadcaster."""
    redis_url = os.getenv("REDIS_URL")
    if not redis_url:
        logger.warning("redis_fanout_not_started", extra={"reason": "REDIS_URL missing"})
        return

    backoff_seconds = 1.0
    while True:
        client: redis_asyncio.Redis | None = None
        pubsub: redis_asyncio.client.PubSub | None = None
        try:
            client = redis_asyncio.from_url(redis_url)
            pubsub = client.pubsub()
            await pubsub.subscribe(channel)
            logger.info("redis_fanout_subscribed", extra={"channel": channel})
            backoff_seconds = 1.0

            while True:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message is None:
                    await asyncio.sleep(0.05)
                    continue

                payload = _decode_value(message.get("data"))
                if not payload:
                    continue
                try:
                    event = parse_event(payload)
                except ValueError:
                    logger.warning("redis_fanout_invalid_event", extra={"channel": channel})
                    continue
                broadcaster.deliver(event)
        except asyncio.CancelledError:
            logger.info("redis_fanout_cancelled")
            raise
        except Exception:
            logger.exception(
                "redis_fanout_error",
                extra={"backoff_seconds": backoff_seconds},
            )
            await asyncio.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, 5.0)
        finally:
            if pubsub is not None:
                await pubsub.aclose()
            if client is not None:
                await client.aclose()
