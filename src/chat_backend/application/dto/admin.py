"""Read models for the admin back office."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from chat_backend.application.dto.group import GroupMemberDTO
from chat_backend.domain.entities.group import Group
from chat_backend.domain.entities.user import User


@dataclass(frozen=True, slots=True)
class UserStatsDTO:
    id: UUID
    email: str
    first_name: str
    last_name: str
    country: str | None
    is_verified: bool
    created_at: datetime
    sent_message_count: int
    group_count: int


@dataclass(frozen=True, slots=True)
class UserGroupDTO:
    """One group a user belongs to."""

    id: UUID
    name: str
    joined_at: datetime


@dataclass(frozen=True, slots=True)
class UserDetailDTO:
    user: User
    groups: list[UserGroupDTO] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class GroupStatsDTO:
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
    member_count: int
    message_count: int


@dataclass(frozen=True, slots=True)
class GroupDetailDTO:
    group: Group
    members: list[GroupMemberDTO]
    message_count: int
