from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pulse_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from pulse_chat.api.v1.routers import (
    auth,
    conversations,
    health,
    messages,
    users,
    ws,
)
from pulse_chat.application.exceptions import AppError
from pulse_chat.config import settings
from pulse_chat.infrastructure.auth.ws_tokens import LiveTokenIssuer
from pulse_chat.infrastructure.db.directory import SqlParticipantDirectory
from pulse_chat.infrastructure.db.session import AsyncSessionLocal, engine
from pulse_chat.infrastructure.ws.dispatcher import BroadcastDispatcher
from pulse_chat.infrastructure.ws.registry import ConnectionRegistry
from pulse_chat.infrastructure.ws.typing_relay import TypingRelay

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    logger.info("Live channel ready (heartbeat=%ss)", settings.WS_HEARTBEAT_SECONDS)

    yield

    for user_id in app.state.registry.online_user_ids():
        handle = app.state.registry.lookup(user_id)
        if handle is not None:
            await handle.close(1001, "Server shutting down")
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Pulse Chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    # The registry is process-local: one server process owns every live socket.
    registry = ConnectionRegistry()
    dispatcher = BroadcastDispatcher(registry)
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.typing_relay = TypingRelay(dispatcher, SqlParticipantDirectory(AsyncSessionLocal))
    app.state.live_tokens = LiveTokenIssuer(
        settings.ws_token_secret, settings.WS_TOKEN_TTL_SECONDS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(_req: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
