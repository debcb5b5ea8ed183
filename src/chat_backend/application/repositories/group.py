from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_backend.application.dto.admin import GroupStatsDTO
from chat_backend.application.dto.group import GroupSummaryDTO
from chat_backend.domain.entities.group import Group


class GroupReader(Protocol):
    async def get_by_id(self, group_id: UUID) -> Group | None: ...

    async def list_for_user(self, user_id: UUID) -> list[GroupSummaryDTO]:
        """Groups the user is a member of, with member counts."""
        ...

    async def list_with_stats(self) -> list[GroupStatsDTO]: ...


class GroupWriter(Protocol):
    async def create(self, group: Group) -> Group: ...
