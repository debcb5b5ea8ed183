from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class DirectMessage:
    id: UUID
    content: str
    sender_id: UUID
    receiver_id: UUID
    created_at: datetime


@dataclass(frozen=True, slots=True)
class GroupMessage:
    id: UUID
    content: str
    user_id: UUID
    group_id: UUID
    created_at: datetime
