"""Inbound event dispatch for authenticated connections."""
from __future__ import annotations

import logging
from typing import assert_never

import pydantic

from chat_backend.application.exceptions import AppError, StorageError
from chat_backend.application.ports.bus import Broadcaster
from chat_backend.application.uow import UnitOfWork, UoWFactory
from chat_backend.domain.value_objects.rooms import GroupRoom, UserRoom
from chat_backend.infrastructure.ws import protocol
from chat_backend.infrastructure.ws.connection import Connection
from chat_backend.infrastructure.ws.protocol import (
    DirectMessageData,
    DirectMessageIn,
    GroupMessageData,
    GroupMessageIn,
    GroupRef,
    JoinGroupIn,
    LeaveGroupIn,
    UnknownEventError,
    WsInbound,
)
from chat_backend.infrastructure.ws.registry import ConnectionRegistry
from chat_backend.infrastructure.ws.rooms import RoomMembershipManager
from chat_backend.services import message_service

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send message"
JOIN_FAILED = "Failed to join group"
LEAVE_FAILED = "Failed to leave group"


class MessageRouter:
    """Validates, persists and fans out events from one connection.

    Every failure ends as a single ``error`` event to the originating
    connection; nothing is broadcast for a failed event and the connection
    stays open.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        rooms: RoomMembershipManager,
        broadcaster: Broadcaster,
        uow_factory: UoWFactory,
    ) -> None:
        self._registry = registry
        self._rooms = rooms
        self._broadcaster = broadcaster
        self._uow_factory = uow_factory

    async def handle_frame(self, connection: Connection, raw: str) -> None:
        try:
            event = protocol.parse_inbound(raw)
        except UnknownEventError as exc:
            await self._reject(connection, f"Unknown event: {exc.event_type}")
            return
        except pydantic.ValidationError:
            await self._reject(connection, "Invalid payload")
            return
        await self.dispatch(connection, event)

    async def dispatch(self, connection: Connection, event: WsInbound) -> None:
        failure = _failure_message(event)
        try:
            async with self._uow_factory() as uow:
                await self._route(connection, event, uow)
        except StorageError:
            logger.exception("Storage failure handling %s for %s", event.type, connection)
            await self._reject(connection, failure)
        except AppError as exc:
            logger.debug("%s rejected for %s: %s", event.type, connection, exc.detail)
            await self._reject(connection, exc.detail)
        except Exception:
            logger.exception("Unhandled error handling %s for %s", event.type, connection)
            await self._reject(connection, failure)

    async def _route(
        self,
        connection: Connection,
        event: WsInbound,
        uow: UnitOfWork,
    ) -> None:
        if isinstance(event, DirectMessageIn):
            await self.handle_direct_message(connection, event.data, uow)
        elif isinstance(event, JoinGroupIn):
            await self.handle_group_join(connection, event.data, uow)
        elif isinstance(event, LeaveGroupIn):
            await self.handle_group_leave(connection, event.data, uow)
        elif isinstance(event, GroupMessageIn):
            await self.handle_group_message(connection, event.data, uow)
        else:
            assert_never(event)

    async def handle_direct_message(
        self,
        connection: Connection,
        data: DirectMessageData,
        uow: UnitOfWork,
    ) -> None:
        msg = await message_service.send_direct_message(
            data.receiver_id, connection.principal, data.content, uow,
        )
        await self._broadcaster.fanout(
            UserRoom(msg.receiver_id), protocol.direct_message(msg),
        )
        await self._registry.send(connection, protocol.message_sent(msg))

    async def handle_group_join(
        self,
        connection: Connection,
        data: GroupRef,
        uow: UnitOfWork,
    ) -> None:
        await self._rooms.join(connection, data.group_id, uow)

    async def handle_group_leave(
        self,
        connection: Connection,
        data: GroupRef,
        uow: UnitOfWork,
    ) -> None:
        await self._rooms.leave(connection, data.group_id, uow)

    async def handle_group_message(
        self,
        connection: Connection,
        data: GroupMessageData,
        uow: UnitOfWork,
    ) -> None:
        # Membership is checked inside the service before anything is written.
        msg = await message_service.send_group_message(
            data.group_id, connection.principal, data.content, uow,
        )
        # The sender gets the broadcast like every other subscriber.
        await self._broadcaster.fanout(
            GroupRoom(msg.group_id), protocol.group_message(msg),
        )

    async def _reject(self, connection: Connection, message: str) -> None:
        await self._registry.send(connection, protocol.error(message))


def _failure_message(event: WsInbound) -> str:
    if isinstance(event, JoinGroupIn):
        return JOIN_FAILED
    if isinstance(event, LeaveGroupIn):
        return LEAVE_FAILED
    return SEND_FAILED
