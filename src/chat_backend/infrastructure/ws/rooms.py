"""Group join/leave against persisted membership and the live registry."""
from __future__ import annotations

import logging
from uuid import UUID

from chat_backend.application.ports.bus import Broadcaster
from chat_backend.application.uow import UnitOfWork
from chat_backend.domain.entities.membership import Membership
from chat_backend.domain.value_objects.rooms import GroupRoom
from chat_backend.infrastructure.ws import protocol
from chat_backend.infrastructure.ws.connection import Connection
from chat_backend.infrastructure.ws.registry import ConnectionRegistry
from chat_backend.services import membership_service

logger = logging.getLogger(__name__)


class RoomMembershipManager:
    """Keeps live group subscriptions in step with Membership rows.

    A subscription is only ever added after the row is known to exist and
    only ever removed after the row is gone; nothing is broadcast for a
    failed operation.
    """

    def __init__(self, registry: ConnectionRegistry, broadcaster: Broadcaster) -> None:
        self._registry = registry
        self._broadcaster = broadcaster

    async def join(
        self,
        connection: Connection,
        group_id: UUID,
        uow: UnitOfWork,
    ) -> Membership:
        principal = connection.principal
        membership, created = await membership_service.join_group(
            group_id, principal, uow,
        )
        room = GroupRoom(group_id)
        await self._registry.subscribe(connection, room)
        await self._registry.send(connection, protocol.group_joined(group_id))
        # Re-joining still announces user-joined to the other members.
        await self._broadcaster.fanout(
            room,
            protocol.user_joined(group_id, principal.id),
            exclude=connection.id,
        )
        logger.info(
            "User %s joined group %s (new_membership=%s)", principal.id, group_id, created,
        )
        return membership

    async def leave(
        self,
        connection: Connection,
        group_id: UUID,
        uow: UnitOfWork,
    ) -> None:
        principal = connection.principal
        await membership_service.leave_group(group_id, principal, uow)
        room = GroupRoom(group_id)
        # The row is gone for every device of this user, not only this one.
        await self.evict(principal.id, group_id)
        await self._registry.send(connection, protocol.group_left(group_id))
        await self._broadcaster.fanout(
            room,
            protocol.user_left(group_id, principal.id),
            exclude=connection.id,
        )
        logger.info("User %s left group %s", principal.id, group_id)

    async def evict(self, user_id: UUID, group_id: UUID) -> None:
        """Drop all of a user's live subscriptions to a group, on every process."""
        room = GroupRoom(group_id)
        await self._registry.evict(user_id, room)
        if self._broadcaster is not self._registry:
            await self._broadcaster.evict(user_id, room)

