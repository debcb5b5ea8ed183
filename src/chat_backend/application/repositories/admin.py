from __future__ import annotations

from typing import Protocol
from uuid import UUID

from chat_backend.domain.entities.admin import Admin


class AdminReader(Protocol):
    async def get_by_id(self, admin_id: UUID) -> Admin | None: ...

    async def list_all(self) -> list[Admin]: ...
