from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserListItemResponse(_Schema):
    id: UUID
    email: str
    first_name: str
    last_name: str
    country: str | None = None


class ProfileResponse(UserListItemResponse):
    created_at: datetime
