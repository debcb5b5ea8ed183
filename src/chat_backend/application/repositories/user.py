from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_backend.application.dto.admin import UserStatsDTO
from chat_backend.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...

    async def list_verified(self, *, exclude_id: UUID | None = None) -> list[User]:
        """Verified users, for picking a direct-message peer."""
        ...

    async def list_with_stats(self) -> list[UserStatsDTO]: ...
