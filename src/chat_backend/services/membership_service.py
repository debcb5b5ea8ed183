from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from chat_backend.application.uow import UnitOfWork
from chat_backend.domain.entities.membership import Membership


async def join_group(
    group_id: UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    allow_existing: bool = True,
) -> tuple[Membership, bool]:
    """Ensure ``principal`` is a member of the group.

    Returns (membership, created). Re-joining returns the existing row with
    created=False, or raises ConflictError when ``allow_existing`` is off.
    """
    group = await uow.groups.get_by_id(group_id)
    if group is None:
        raise NotFoundError("Group not found")

    existing = await uow.memberships.get(principal.id, group_id)
    if existing is None:
        membership, created = await uow.memberships_w.create_if_not_exists(
            Membership(
                user_id=principal.id,
                group_id=group_id,
                joined_at=datetime.now(timezone.utc),
            )
        )
    else:
        membership, created = existing, False

    if not created and not allow_existing:
        raise ConflictError("Already a member of this group")

    if created:
        await uow.commit()
    return membership, created


async def leave_group(
    group_id: UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> None:
    # Delete first, fail on a missing row: of two concurrent leaves one wins
    # and the other reports NotFound.
    deleted = await uow.memberships_w.delete(principal.id, group_id)
    if not deleted:
        raise NotFoundError("Not a member of this group")
    await uow.commit()


async def require_member(
    group_id: UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Membership:
    membership = await uow.memberships.get(principal.id, group_id)
    if membership is None:
        raise ForbiddenError("You are not a member of this group")
    return membership
