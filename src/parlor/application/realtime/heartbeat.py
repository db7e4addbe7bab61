from __future__ import annotations

import asyncio
import logging

from parlor.application.realtime.broadcaster import Broadcaster

logger = logging.getLogger(__name__)


async def run_heartbeat(broadcaster: Broadcaster, interval_seconds: float = 30.0) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            pruned = broadcaster.heartbeat()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("broadcast_heartbeat_failed")
            continue
        if pruned:
            logger.info("broadcast_heartbeat_pruned", extra={"pruned": len(pruned)})
