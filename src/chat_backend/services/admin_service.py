"""Back-office reads. Callers are gated by ``auth_service.authenticate_admin``."""
from __future__ import annotations

import uuid

from chat_backend.application.dto.admin import (
    GroupDetailDTO,
    GroupStatsDTO,
    UserDetailDTO,
    UserStatsDTO,
)
from chat_backend.application.exceptions import NotFoundError
from chat_backend.application.uow import UnitOfWork
from chat_backend.domain.entities.admin import Admin


async def list_users(uow: UnitOfWork) -> list[UserStatsDTO]:
    return await uow.users.list_with_stats()


async def get_user(user_id: uuid.UUID, uow: UnitOfWork) -> UserDetailDTO:
    user = await uow.users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    groups = await uow.memberships.list_groups_of_user(user_id)
    return UserDetailDTO(user=user, groups=groups)


async def list_groups(uow: UnitOfWork) -> list[GroupStatsDTO]:
    return await uow.groups.list_with_stats()


async def get_group(group_id: uuid.UUID, uow: UnitOfWork) -> GroupDetailDTO:
    group = await uow.groups.get_by_id(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    members = await uow.memberships.list_members(group_id)
    message_count = await uow.messages.count_group(group_id)
    return GroupDetailDTO(group=group, members=members, message_count=message_count)


async def list_admins(uow: UnitOfWork) -> list[Admin]:
    return await uow.admins.list_all()


async def get_admin(admin_id: uuid.UUID, uow: UnitOfWork) -> Admin:
    admin = await uow.admins.get_by_id(admin_id)
    if admin is None:
        raise NotFoundError("Admin not found")
    return admin
