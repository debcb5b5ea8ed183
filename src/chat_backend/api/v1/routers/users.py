from __future__ import annotations

from fastapi import APIRouter

from chat_backend.api.deps import CurrentPrincipal, UoWDep
from chat_backend.api.v1.schemas.user import ProfileResponse, UserListItemResponse
from chat_backend.services import user_service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ProfileResponse:
    user = await user_service.get_profile(principal, uow)
    return ProfileResponse.model_validate(user)


@router.get("", response_model=list[UserListItemResponse])
async def list_users(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[UserListItemResponse]:
    users = await user_service.list_users(principal, uow)
    return [UserListItemResponse.model_validate(u) for u in users]
