from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from chat_backend.application.dto.admin import GroupStatsDTO
from chat_backend.application.dto.group import GroupSummaryDTO
from chat_backend.domain.entities.group import Group
from chat_backend.infrastructure.db.mappers import group as mapper
from chat_backend.infrastructure.db.models.group import GroupModel
from chat_backend.infrastructure.db.models.membership import GroupMemberModel
from chat_backend.infrastructure.db.models.message import GroupMessageModel


class GroupReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, group_id: UUID) -> Group | None:
        result = await self._session.get(GroupModel, group_id)
        return mapper.model_to_entity(result) if result else None

    async def list_for_user(self, user_id: UUID) -> list[GroupSummaryDTO]:
        own = aliased(GroupMemberModel)
        member_count = (
            select(func.count(GroupMemberModel.id))
            .where(GroupMemberModel.group_id == GroupModel.id)
            .correlate(GroupModel)
            .scalar_subquery()
        )
        stmt = (
            select(GroupModel, own.joined_at, member_count)
            .join(own, own.group_id == GroupModel.id)
            .where(own.user_id == user_id)
            .order_by(own.joined_at.asc())
        )
        result = await self._session.execute(stmt)
        return [
            GroupSummaryDTO(
                id=group.id,
                name=group.name,
                created_at=group.created_at,
                updated_at=group.updated_at,
                member_count=count,
                joined_at=joined_at,
            )
            for group, joined_at, count in result.all()
        ]

    async def list_with_stats(self) -> list[GroupStatsDTO]:
        member_count = (
            select(func.count(GroupMemberModel.id))
            .where(GroupMemberModel.group_id == GroupModel.id)
            .correlate(GroupModel)
            .scalar_subquery()
        )
        message_count = (
            select(func.count(GroupMessageModel.id))
            .where(GroupMessageModel.group_id == GroupModel.id)
            .correlate(GroupModel)
            .scalar_subquery()
        )
        stmt = select(GroupModel, member_count, message_count).order_by(
            GroupModel.created_at.asc()
        )
        result = await self._session.execute(stmt)
        return [
            GroupStatsDTO(
                id=group.id,
                name=group.name,
                created_at=group.created_at,
                updated_at=group.updated_at,
                member_count=members,
                message_count=messages,
            )
            for group, members, messages in result.all()
        ]


class GroupWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, group: Group) -> Group:
        model = mapper.entity_to_model(group)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)
