from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.application.dto.admin import UserStatsDTO
from chat_backend.domain.entities.user import User
from chat_backend.infrastructure.db.mappers import user as mapper
from chat_backend.infrastructure.db.models.membership import GroupMemberModel
from chat_backend.infrastructure.db.models.message import DirectMessageModel
from chat_backend.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(result) if result else None

    async def list_verified(self, *, exclude_id: UUID | None = None) -> list[User]:
        stmt = select(UserModel).where(UserModel.is_verified.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(UserModel.id != exclude_id)
        stmt = stmt.order_by(UserModel.first_name.asc(), UserModel.last_name.asc())
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_with_stats(self) -> list[UserStatsDTO]:
        sent = (
            select(func.count(DirectMessageModel.id))
            .where(DirectMessageModel.sender_id == UserModel.id)
            .correlate(UserModel)
            .scalar_subquery()
        )
        groups = (
            select(func.count(GroupMemberModel.id))
            .where(GroupMemberModel.user_id == UserModel.id)
            .correlate(UserModel)
            .scalar_subquery()
        )
        stmt = select(UserModel, sent, groups).order_by(UserModel.created_at.asc())
        result = await self._session.execute(stmt)
        return [
            UserStatsDTO(
                id=user.id,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                country=user.country,
                is_verified=user.is_verified,
                created_at=user.created_at,
                sent_message_count=sent_count,
                group_count=group_count,
            )
            for user, sent_count, group_count in result.all()
        ]
