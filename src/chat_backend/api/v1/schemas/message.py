from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DirectMessageResponse(_Schema):
    id: UUID
    content: str
    sender_id: UUID
    receiver_id: UUID
    created_at: datetime


class GroupMessageResponse(_Schema):
    id: UUID
    content: str
    user_id: UUID
    group_id: UUID
    created_at: datetime


class MessagePage(_Schema, Generic[T]):
    items: list[T]  # type: ignore[type-var]
    next_cursor: str | None = None
