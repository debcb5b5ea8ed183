from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.domain.entities.message import DirectMessage, GroupMessage
from chat_backend.infrastructure.db.mappers import message as mapper
from chat_backend.infrastructure.db.models.message import (
    DirectMessageModel,
    GroupMessageModel,
)
from chat_backend.application.pagination import decode_cursor


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_direct(
        self,
        user_id: UUID,
        peer_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[DirectMessage]:
        stmt = (
            select(DirectMessageModel)
            .where(
                or_(
                    and_(
                        DirectMessageModel.sender_id == user_id,
                        DirectMessageModel.receiver_id == peer_id,
                    ),
                    and_(
                        DirectMessageModel.sender_id == peer_id,
                        DirectMessageModel.receiver_id == user_id,
                    ),
                )
            )
            .order_by(DirectMessageModel.created_at.asc(), DirectMessageModel.id.asc())
            .limit(limit)
        )
        if cursor:
            ts, mid = decode_cursor(cursor)
            stmt = stmt.where(
                (DirectMessageModel.created_at > ts)
                | ((DirectMessageModel.created_at == ts) & (DirectMessageModel.id > mid))
            )
        result = await self._session.execute(stmt)
        return [mapper.direct_to_entity(m) for m in result.scalars().all()]

    async def list_group(
        self,
        group_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[GroupMessage]:
        stmt = (
            select(GroupMessageModel)
            .where(GroupMessageModel.group_id == group_id)
            .order_by(GroupMessageModel.created_at.asc(), GroupMessageModel.id.asc())
            .limit(limit)
        )
        if cursor:
            ts, mid = decode_cursor(cursor)
            stmt = stmt.where(
                (GroupMessageModel.created_at > ts)
                | ((GroupMessageModel.created_at == ts) & (GroupMessageModel.id > mid))
            )
        result = await self._session.execute(stmt)
        return [mapper.group_to_entity(m) for m in result.scalars().all()]

    async def count_group(self, group_id: UUID) -> int:
        stmt = select(func.count(GroupMessageModel.id)).where(
            GroupMessageModel.group_id == group_id
        )
        return (await self._session.execute(stmt)).scalar_one()


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_direct(self, message: DirectMessage) -> DirectMessage:
        model = mapper.direct_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.direct_to_entity(model)

    async def create_group(self, message: GroupMessage) -> GroupMessage:
        model = mapper.group_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.group_to_entity(model)
