from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from chat_backend.api.deps import CurrentPrincipal, RoomsDep, UoWDep
from chat_backend.api.v1.schemas.group import (
    CreateGroupRequest,
    GroupMemberResponse,
    GroupResponse,
    GroupSummaryResponse,
    MembershipResponse,
)
from chat_backend.api.v1.schemas.message import GroupMessageResponse, MessagePage
from chat_backend.application.pagination import next_cursor
from chat_backend.services import group_service, membership_service, message_service

router = APIRouter(prefix="/api/v1/groups", tags=["groups"])


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    body: CreateGroupRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> GroupResponse:
    group = await group_service.create_group(body.name, principal, uow)
    return GroupResponse.model_validate(group)


@router.get("", response_model=list[GroupSummaryResponse])
async def list_groups(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[GroupSummaryResponse]:
    groups = await group_service.list_user_groups(principal, uow)
    return [GroupSummaryResponse.model_validate(g) for g in groups]


@router.post("/{group_id}/join", response_model=MembershipResponse)
async def join_group(
    group_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MembershipResponse:
    membership, _created = await membership_service.join_group(
        group_id, principal, uow, allow_existing=False,
    )
    return MembershipResponse.model_validate(membership)


@router.post("/{group_id}/leave", status_code=204)
async def leave_group(
    group_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    rooms: RoomsDep,
) -> None:
    await membership_service.leave_group(group_id, principal, uow)
    # Live subscriptions must not outlive the membership row.
    await rooms.evict(principal.id, group_id)


@router.get("/{group_id}/members", response_model=list[GroupMemberResponse])
async def list_members(
    group_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[GroupMemberResponse]:
    members = await group_service.list_members(group_id, principal, uow)
    return [GroupMemberResponse.model_validate(m) for m in members]


@router.get("/{group_id}/messages", response_model=MessagePage[GroupMessageResponse])
async def list_group_messages(
    group_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> MessagePage[GroupMessageResponse]:
    messages = await message_service.list_group_messages(
        group_id, principal, cursor, limit, uow,
    )
    return MessagePage[GroupMessageResponse](
        items=[GroupMessageResponse.model_validate(m) for m in messages],
        next_cursor=next_cursor(messages, limit),
    )
