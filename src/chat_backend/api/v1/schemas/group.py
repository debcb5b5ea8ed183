from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CreateGroupRequest(_Schema):
    name: str = Field(min_length=3, max_length=100)


class GroupResponse(_Schema):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime


class GroupSummaryResponse(GroupResponse):
    member_count: int
    joined_at: datetime


class GroupMemberResponse(_Schema):
    id: UUID = Field(validation_alias="user_id")
    first_name: str
    last_name: str
    email: str
    joined_at: datetime


class MembershipResponse(_Schema):
    group_id: UUID
    user_id: UUID
    joined_at: datetime
