from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from chat_backend.domain.value_objects.enums import Role
from chat_backend.domain.value_objects.rooms import UserRoom


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    id: UUID
    email: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def room(self) -> UserRoom:
        """Implicit room every connection of this principal is bound to."""
        return UserRoom(self.id)
