from __future__ import annotations

import uuid
from datetime import datetime, timezone

from chat_backend.application.dto.group import GroupMemberDTO, GroupSummaryDTO
from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import NotFoundError
from chat_backend.application.uow import UnitOfWork
from chat_backend.domain.entities.group import Group
from chat_backend.domain.entities.membership import Membership
from chat_backend.services import membership_service


async def create_group(
    name: str,
    principal: Principal,
    uow: UnitOfWork,
) -> Group:
    """Create a group with its creator as the first member."""
    now = datetime.now(timezone.utc)
    group = Group(id=uuid.uuid4(), name=name, created_at=now, updated_at=now)
    group = await uow.groups_w.create(group)

    await uow.memberships_w.create_if_not_exists(
        Membership(user_id=principal.id, group_id=group.id, joined_at=now)
    )
    await uow.commit()
    return group


async def list_user_groups(
    principal: Principal,
    uow: UnitOfWork,
) -> list[GroupSummaryDTO]:
    return await uow.groups.list_for_user(principal.id)


async def list_members(
    group_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> list[GroupMemberDTO]:
    group = await uow.groups.get_by_id(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    await membership_service.require_member(group_id, principal, uow)
    return await uow.memberships.list_members(group_id)
