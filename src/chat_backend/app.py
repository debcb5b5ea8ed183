from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_backend.api.middleware.correlation_id import CorrelationIdMiddleware
from chat_backend.api.middleware.request_timing import RequestTimingMiddleware
from chat_backend.api.v1.routers import admin, groups, health, messages, users, ws
from chat_backend.application.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)
from chat_backend.config import settings
from chat_backend.infrastructure.bus.redis_pubsub import (
    RedisBroadcaster,
    RedisPubSubSubscriber,
    deliver_locally,
)
from chat_backend.infrastructure.bus.serializer import BusEnvelope
from chat_backend.infrastructure.ws.registry import ConnectionRegistry
from chat_backend.infrastructure.ws.rooms import RoomMembershipManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle of the live connection state."""
    registry = ConnectionRegistry()
    app.state.registry = registry

    subscriber: RedisPubSubSubscriber | None = None
    if settings.FANOUT_BACKEND == "redis":
        app.state.redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        logger.info("Redis connection pool created")

        async def _deliver(envelope: BusEnvelope) -> None:
            await deliver_locally(registry, envelope)

        subscriber = RedisPubSubSubscriber(
            app.state.redis, settings.REDIS_FANOUT_CHANNEL, _deliver,
        )
        await subscriber.start()
        app.state.broadcaster = RedisBroadcaster(app.state.redis, settings.REDIS_FANOUT_CHANNEL)
    else:
        app.state.broadcaster = registry

    app.state.rooms = RoomMembershipManager(registry, app.state.broadcaster)
    logger.info("Realtime fanout backend: %s", settings.FANOUT_BACKEND)

    yield

    await registry.close()
    if subscriber is not None:
        await subscriber.stop()
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Chat Backend",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(groups.router)
    app.include_router(messages.router)
    app.include_router(users.router)
    app.include_router(admin.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(UnauthenticatedError)
    async def _unauthenticated(_req: Request, exc: UnauthenticatedError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": exc.detail})

    @app.exception_handler(StorageError)
    async def _storage(req: Request, exc: StorageError) -> JSONResponse:
        logger.error(
            "Storage failure on %s %s", req.method, req.url.path,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return JSONResponse(status_code=503, content={"detail": "Service unavailable"})
