from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from chat_backend.api.deps import CurrentAdmin, UoWDep
from chat_backend.api.v1.schemas.admin import (
    AdminAccountResponse,
    AdminGroupDetailResponse,
    AdminGroupSummaryResponse,
    AdminUserDetailResponse,
    AdminUserSummaryResponse,
)
from chat_backend.services import admin_service

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/users", response_model=list[AdminUserSummaryResponse])
async def list_users(
    admin: CurrentAdmin,
    uow: UoWDep,
) -> list[AdminUserSummaryResponse]:
    users = await admin_service.list_users(uow)
    return [AdminUserSummaryResponse.model_validate(u) for u in users]


@router.get("/users/{user_id}", response_model=AdminUserDetailResponse)
async def get_user(
    user_id: UUID,
    admin: CurrentAdmin,
    uow: UoWDep,
) -> AdminUserDetailResponse:
    detail = await admin_service.get_user(user_id, uow)
    return AdminUserDetailResponse.from_dto(detail)


@router.get("/groups", response_model=list[AdminGroupSummaryResponse])
async def list_groups(
    admin: CurrentAdmin,
    uow: UoWDep,
) -> list[AdminGroupSummaryResponse]:
    groups = await admin_service.list_groups(uow)
    return [AdminGroupSummaryResponse.model_validate(g) for g in groups]


@router.get("/groups/{group_id}", response_model=AdminGroupDetailResponse)
async def get_group(
    group_id: UUID,
    admin: CurrentAdmin,
    uow: UoWDep,
) -> AdminGroupDetailResponse:
    detail = await admin_service.get_group(group_id, uow)
    return AdminGroupDetailResponse.from_dto(detail)


@router.get("/admins", response_model=list[AdminAccountResponse])
async def list_admins(
    admin: CurrentAdmin,
    uow: UoWDep,
) -> list[AdminAccountResponse]:
    admins = await admin_service.list_admins(uow)
    return [AdminAccountResponse.model_validate(a) for a in admins]


@router.get("/admins/{admin_id}", response_model=AdminAccountResponse)
async def get_admin(
    admin_id: UUID,
    admin: CurrentAdmin,
    uow: UoWDep,
) -> AdminAccountResponse:
    account = await admin_service.get_admin(admin_id, uow)
    return AdminAccountResponse.model_validate(account)
