from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.domain.entities.admin import Admin
from chat_backend.infrastructure.db.mappers import admin as mapper
from chat_backend.infrastructure.db.models.admin import AdminModel


class AdminReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, admin_id: UUID) -> Admin | None:
        result = await self._session.get(AdminModel, admin_id)
        return mapper.model_to_entity(result) if result else None

    async def list_all(self) -> list[Admin]:
        result = await self._session.execute(
            select(AdminModel).order_by(AdminModel.created_at.asc())
        )
        return [mapper.model_to_entity(m) for m in result.scalars().all()]
