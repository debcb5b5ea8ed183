"""Fan-out targets.

A room is either a user's implicit channel (every live connection of that
user) or an explicitly joined group channel.
"""
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class UserRoom:
    user_id: UUID

    @property
    def key(self) -> str:
        return f"user:{self.user_id}"


@dataclass(frozen=True, slots=True)
class GroupRoom:
    group_id: UUID

    @property
    def key(self) -> str:
        return f"group:{self.group_id}"


Room = UserRoom | GroupRoom


def parse_room(key: str) -> Room:
    """Inverse of ``Room.key``. Raises ValueError on anything else."""
    kind, sep, raw_id = key.partition(":")
    if not sep:
        raise ValueError(f"Malformed room key: {key!r}")
    if kind == "user":
        return UserRoom(UUID(raw_id))
    if kind == "group":
        return GroupRoom(UUID(raw_id))
    raise ValueError(f"Unknown room kind: {kind!r}")
