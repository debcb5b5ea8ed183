from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from chat_backend.application.repositories.admin import AdminReader
from chat_backend.application.repositories.group import GroupReader, GroupWriter
from chat_backend.application.repositories.membership import (
    MembershipReader,
    MembershipWriter,
)
from chat_backend.application.repositories.message import MessageReader, MessageWriter
from chat_backend.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    users: UserReader
    admins: AdminReader
    groups: GroupReader
    groups_w: GroupWriter
    memberships: MembershipReader
    memberships_w: MembershipWriter
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
"""Opens a fresh unit of work; used where no request scope exists (WebSocket events)."""
