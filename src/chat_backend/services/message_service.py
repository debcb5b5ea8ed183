from __future__ import annotations

import uuid
from datetime import datetime, timezone

from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import NotFoundError
from chat_backend.application.uow import UnitOfWork
from chat_backend.domain.entities.message import DirectMessage, GroupMessage
from chat_backend.services import membership_service


async def send_direct_message(
    receiver_id: uuid.UUID,
    principal: Principal,
    content: str,
    uow: UnitOfWork,
) -> DirectMessage:
    receiver = await uow.users.get_by_id(receiver_id)
    if receiver is None:
        raise NotFoundError("Receiver not found")

    msg = DirectMessage(
        id=uuid.uuid4(),
        content=content,
        sender_id=principal.id,
        receiver_id=receiver_id,
        created_at=datetime.now(timezone.utc),
    )
    msg = await uow.messages_w.create_direct(msg)
    await uow.commit()
    return msg


async def send_group_message(
    group_id: uuid.UUID,
    principal: Principal,
    content: str,
    uow: UnitOfWork,
) -> GroupMessage:
    """Persist a group message. Membership is checked at creation time."""
    await membership_service.require_member(group_id, principal, uow)

    msg = GroupMessage(
        id=uuid.uuid4(),
        content=content,
        user_id=principal.id,
        group_id=group_id,
        created_at=datetime.now(timezone.utc),
    )
    msg = await uow.messages_w.create_group(msg)
    await uow.commit()
    return msg


async def list_direct_messages(
    peer_id: uuid.UUID,
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[DirectMessage]:
    peer = await uow.users.get_by_id(peer_id)
    if peer is None:
        raise NotFoundError("User not found")
    return await uow.messages.list_direct(
        principal.id, peer_id, cursor=cursor, limit=limit,
    )


async def list_group_messages(
    group_id: uuid.UUID,
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[GroupMessage]:
    group = await uow.groups.get_by_id(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    await membership_service.require_member(group_id, principal, uow)
    return await uow.messages.list_group(group_id, cursor=cursor, limit=limit)
