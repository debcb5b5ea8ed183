from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, WebSocket, status

from chat_backend.api.deps import (
    RegistryDep,
    RoomsDep,
    UoWFactoryDep,
    VerifierDep,
    get_broadcaster,
)
from chat_backend.api.middleware.correlation_id import correlation_id_ctx
from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import StorageError, UnauthenticatedError
from chat_backend.application.ports.auth import TokenVerifier
from chat_backend.application.ports.bus import Broadcaster
from chat_backend.application.uow import UoWFactory
from chat_backend.config import settings
from chat_backend.infrastructure.ws.connection import Connection
from chat_backend.infrastructure.ws.dispatcher import MessageRouter
from chat_backend.infrastructure.ws.session import ConnectionSession
from chat_backend.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

WS_CLOSE_UNAUTHENTICATED = 4001


def _credential(websocket: WebSocket, token: str | None) -> str | None:
    if token:
        return token
    header = websocket.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()
    return None


async def _authenticate(
    token: str | None,
    verifier: TokenVerifier,
    uow_factory: UoWFactory,
) -> Principal:
    async with uow_factory() as uow:
        return await auth_service.authenticate(token, verifier, uow)


@router.websocket("/ws")
async def ws_chat(
    websocket: WebSocket,
    registry: RegistryDep,
    verifier: VerifierDep,
    uow_factory: UoWFactoryDep,
    rooms: RoomsDep,
    broadcaster: Annotated[Broadcaster, Depends(get_broadcaster)],
    token: str | None = Query(None),
) -> None:
    # Nothing is accepted, registered or processed before the handshake passes.
    try:
        principal = await _authenticate(
            _credential(websocket, token), verifier, uow_factory,
        )
    except UnauthenticatedError as exc:
        logger.info("WS handshake rejected: %s", exc.detail)
        await websocket.close(code=WS_CLOSE_UNAUTHENTICATED, reason=exc.detail)
        return
    except StorageError:
        logger.exception("WS handshake failed on storage")
        await websocket.close(
            code=status.WS_1011_INTERNAL_ERROR, reason="Authentication failed",
        )
        return

    await websocket.accept()
    connection = Connection(websocket, principal)
    correlation_id_ctx.set(connection.id.hex)

    session = ConnectionSession(
        websocket,
        connection,
        registry,
        MessageRouter(registry, rooms, broadcaster, uow_factory),
        heartbeat_seconds=settings.WS_HEARTBEAT_SECONDS,
        queue_size=settings.WS_INBOUND_QUEUE_SIZE,
    )
    await session.run()
