from __future__ import annotations

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from chat_backend.domain.value_objects.rooms import Room

if TYPE_CHECKING:
    from chat_backend.infrastructure.ws.protocol import WsOutbound


class Broadcaster(Protocol):
    """Delivers one event to every live connection subscribed to a room."""

    async def fanout(
        self,
        room: Room,
        message: WsOutbound,
        *,
        exclude: UUID | None = None,
    ) -> None: ...

    async def evict(self, user_id: UUID, room: Room) -> None:
        """Drop every live connection of ``user_id`` from ``room``."""
        ...
