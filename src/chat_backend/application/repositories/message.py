from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_backend.domain.entities.message import DirectMessage, GroupMessage


class MessageReader(Protocol):
    async def list_direct(
        self,
        user_id: UUID,
        peer_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[DirectMessage]:
        """Messages exchanged between two users, in either direction."""
        ...

    async def list_group(
        self,
        group_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[GroupMessage]: ...

    async def count_group(self, group_id: UUID) -> int: ...


class MessageWriter(Protocol):
    async def create_direct(self, message: DirectMessage) -> DirectMessage: ...

    async def create_group(self, message: GroupMessage) -> GroupMessage: ...
