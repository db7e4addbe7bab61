from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from parlor.api.error_handling import register_exception_handlers
from parlor.api.middleware.access_log import AccessLogMiddleware
from parlor.api.middleware.request_id import RequestIDMiddleware
from parlor.api.routes.events import router as events_router
from parlor.api.routes.health import router as health_router
from parlor.api.routes.metrics import router as metrics_router
from parlor.api.routes.sessions import router as sessions_router
from parlor.api.routes.summary import router as summary_router
from parlor.api.routes.tables import router as tables_router
from parlor.api.runtime import build_runtime
from parlor.api.ws.routes import router as ws_router
from parlor.application.realtime.heartbeat import run_heartbeat
from parlor.infrastructure.messaging.redis_fanout import start_redis_fanout
from parlor.infrastructure.observability.logging_config import configure_logging
from parlor.infrastructure.observability.otel import configure_otel


def _cors_allow_origins() -> list[str]:
    if os.getenv("APP_ENV", "dev").lower() in {"dev", "test"}:
        return ["*"]
    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    runtime = build_runtime()
    app.state.ledger = runtime
    app.state.broadcaster = runtime.broadcaster

    background = [
        asyncio.create_task(
            run_heartbeat(runtime.broadcaster, runtime.heartbeat_interval_seconds)
        ),
        asyncio.create_task(start_redis_fanout(runtime.broadcaster)),
    ]
    try:
        yield
    finally:
        for task in background:
            task.cancel()
        for task in background:
            with suppress(asyncio.CancelledError):
                await task
        runtime.shutdown()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Parlor Ledger", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)
    for router in (
        health_router,
        metrics_router,
        tables_router,
        sessions_router,
        summary_router,
        events_router,
        ws_router,
    ):
        app.include_router(router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
