from __future__ import annotations

from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import NotFoundError
from chat_backend.application.uow import UnitOfWork
from chat_backend.domain.entities.user import User


async def get_profile(principal: Principal, uow: UnitOfWork) -> User:
    user = await uow.users.get_by_id(principal.id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def list_users(principal: Principal, uow: UnitOfWork) -> list[User]:
    """Verified users other than the caller."""
    return await uow.users.list_verified(exclude_id=principal.id)
