from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_backend.application.dto.admin import UserGroupDTO
from chat_backend.application.dto.group import GroupMemberDTO
from chat_backend.domain.entities.membership import Membership


class MembershipReader(Protocol):
    async def get(self, user_id: UUID, group_id: UUID) -> Membership | None: ...

    async def list_members(self, group_id: UUID) -> list[GroupMemberDTO]: ...

    async def list_groups_of_user(self, user_id: UUID) -> list[UserGroupDTO]: ...


class MembershipWriter(Protocol):
    async def create_if_not_exists(
        self, membership: Membership
    ) -> tuple[Membership, bool]:
        """Insert membership. Return (membership, created). On conflict → return existing."""
        ...

    async def delete(self, user_id: UUID, group_id: UUID) -> bool:
        """Delete the row. Return False if there was nothing to delete."""
        ...
