from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.application.dto.admin import UserGroupDTO
from chat_backend.application.dto.group import GroupMemberDTO
from chat_backend.domain.entities.membership import Membership
from chat_backend.infrastructure.db.mappers import membership as mapper
from chat_backend.infrastructure.db.models.group import GroupModel
from chat_backend.infrastructure.db.models.membership import GroupMemberModel
from chat_backend.infrastructure.db.models.user import UserModel


class MembershipReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: UUID, group_id: UUID) -> Membership | None:
        stmt = select(GroupMemberModel).where(
            GroupMemberModel.user_id == user_id,
            GroupMemberModel.group_id == group_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_members(self, group_id: UUID) -> list[GroupMemberDTO]:
        stmt = (
            select(GroupMemberModel.user_id, GroupMemberModel.joined_at, UserModel)
            .join(UserModel, UserModel.id == GroupMemberModel.user_id)
            .where(GroupMemberModel.group_id == group_id)
            .order_by(GroupMemberModel.joined_at.asc())
        )
        result = await self._session.execute(stmt)
        return [
            GroupMemberDTO(
                user_id=user_id,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                joined_at=joined_at,
            )
            for user_id, joined_at, user in result.all()
        ]

    async def list_groups_of_user(self, user_id: UUID) -> list[UserGroupDTO]:
        stmt = (
            select(GroupModel.id, GroupModel.name, GroupMemberModel.joined_at)
            .join(GroupMemberModel, GroupMemberModel.group_id == GroupModel.id)
            .where(GroupMemberModel.user_id == user_id)
            .order_by(GroupMemberModel.joined_at.asc())
        )
        result = await self._session.execute(stmt)
        return [
            UserGroupDTO(id=group_id, name=name, joined_at=joined_at)
            for group_id, name, joined_at in result.all()
        ]


class MembershipWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_if_not_exists(
        self, membership: Membership
    ) -> tuple[Membership, bool]:
        """Insert idempotently against uq_group_member. Returns (membership, created_flag)."""
        stmt = (
            pg_insert(GroupMemberModel)
            .values(
                user_id=membership.user_id,
                group_id=membership.group_id,
                joined_at=membership.joined_at,
            )
            .on_conflict_do_nothing(constraint="uq_group_member")
            .returning(GroupMemberModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.model_to_entity(row), True

        # Lost a race with a concurrent join; fetch the winner's row
        existing = await MembershipReaderRepo(self._session).get(
            membership.user_id, membership.group_id,
        )
        assert existing is not None
        return existing, False

    async def delete(self, user_id: UUID, group_id: UUID) -> bool:
        stmt = delete(GroupMemberModel).where(
            GroupMemberModel.user_id == user_id,
            GroupMemberModel.group_id == group_id,
        )
        result = await self._session.execute(stmt)
        return (result.rowcount or 0) > 0
