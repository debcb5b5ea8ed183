from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from types import TracebackType
from typing import AsyncIterator, Self

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chat_backend.application.exceptions import StorageError
from chat_backend.infrastructure.db.repositories.admin import AdminReaderRepo
from chat_backend.infrastructure.db.repositories.group import (
    GroupReaderRepo,
    GroupWriterRepo,
)
from chat_backend.infrastructure.db.repositories.membership import (
    MembershipReaderRepo,
    MembershipWriterRepo,
)
from chat_backend.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from chat_backend.infrastructure.db.repositories.user import UserReaderRepo
from chat_backend.infrastructure.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession.

    Used as an async context manager: any exception rolls back, and
    SQLAlchemy errors leave it as StorageError.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.users = UserReaderRepo(session)
        self.admins = AdminReaderRepo(session)
        self.groups = GroupReaderRepo(session)
        self.groups_w = GroupWriterRepo(session)
        self.memberships = MembershipReaderRepo(session)
        self.memberships_w = MembershipWriterRepo(session)
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)

    async def flush(self) -> None:
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            return
        try:
            await self.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback failed", exc_info=True)
        if isinstance(exc_val, SQLAlchemyError):
            raise StorageError("Storage failure") from exc_val


@asynccontextmanager
async def open_uow() -> AsyncIterator[SqlAlchemyUoW]:
    """Session-per-unit-of-work, for callers outside a request scope."""
    async with AsyncSessionLocal() as session:
        async with SqlAlchemyUoW(session) as uow:
            yield uow
