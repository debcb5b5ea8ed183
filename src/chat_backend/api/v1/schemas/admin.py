from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from chat_backend.api.v1.schemas.group import GroupMemberResponse
from chat_backend.application.dto.admin import GroupDetailDTO, UserDetailDTO


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AdminUserResponse(_Schema):
    id: UUID
    email: str
    first_name: str
    last_name: str
    country: str | None = None
    is_verified: bool
    created_at: datetime


class AdminUserSummaryResponse(AdminUserResponse):
    sent_message_count: int
    group_count: int


class UserGroupResponse(_Schema):
    id: UUID
    name: str
    joined_at: datetime


class AdminUserDetailResponse(AdminUserResponse):
    groups: list[UserGroupResponse]

    @classmethod
    def from_dto(cls, dto: UserDetailDTO) -> AdminUserDetailResponse:
        base = AdminUserResponse.model_validate(dto.user)
        return cls(
            **base.model_dump(),
            groups=[UserGroupResponse.model_validate(g) for g in dto.groups],
        )


class AdminGroupSummaryResponse(_Schema):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
    member_count: int
    message_count: int


class AdminGroupDetailResponse(_Schema):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
    members: list[GroupMemberResponse]
    message_count: int

    @classmethod
    def from_dto(cls, dto: GroupDetailDTO) -> AdminGroupDetailResponse:
        return cls(
            id=dto.group.id,
            name=dto.group.name,
            created_at=dto.group.created_at,
            updated_at=dto.group.updated_at,
            members=[GroupMemberResponse.model_validate(m) for m in dto.members],
            message_count=dto.message_count,
        )


class AdminAccountResponse(_Schema):
    id: UUID
    email: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime
