from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Group:
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
