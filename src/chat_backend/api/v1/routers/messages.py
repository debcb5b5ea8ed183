from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from chat_backend.api.deps import CurrentPrincipal, UoWDep
from chat_backend.api.v1.schemas.message import DirectMessageResponse, MessagePage
from chat_backend.application.pagination import next_cursor
from chat_backend.services import message_service

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.get("/direct/{user_id}", response_model=MessagePage[DirectMessageResponse])
async def list_direct_messages(
    user_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> MessagePage[DirectMessageResponse]:
    messages = await message_service.list_direct_messages(
        user_id, principal, cursor, limit, uow,
    )
    return MessagePage[DirectMessageResponse](
        items=[DirectMessageResponse.model_validate(m) for m in messages],
        next_cursor=next_cursor(messages, limit),
    )
