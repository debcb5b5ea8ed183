from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class GroupSummaryDTO:
    """A group as seen by one of its members."""

    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
    member_count: int
    joined_at: datetime


@dataclass(frozen=True, slots=True)
class GroupMemberDTO:
    user_id: UUID
    first_name: str
    last_name: str
    email: str
    joined_at: datetime
