"""In-process index of live connections and their room subscriptions."""
from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from chat_backend.domain.value_objects.rooms import Room
from chat_backend.infrastructure.ws.connection import Connection
from chat_backend.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Tracks connections per room.

    All index mutations and the subscriber snapshot taken at the start of a
    fanout happen under one lock: a connection subscribed after the snapshot
    misses that event, one subscribed before it gets it exactly once.
    Sends happen outside the lock.
    """

    def __init__(self) -> None:
        self._connections: dict[UUID, Connection] = {}
        self._rooms: dict[Room, set[UUID]] = {}
        self._subscriptions: dict[UUID, set[Room]] = {}
        self._lock = asyncio.Lock()

    async def register(self, connection: Connection) -> None:
        """Bind the connection to its principal's implicit user room."""
        async with self._lock:
            self._connections[connection.id] = connection
            room = connection.principal.room
            self._subscriptions[connection.id] = {room}
            self._add(connection.id, room)
        logger.debug(
            "WS registered: %s (total=%d)", connection, len(self._connections),
        )

    async def deregister(self, connection: Connection) -> bool:
        """Remove the connection from every room. A second call is a no-op."""
        async with self._lock:
            connection.mark_closed()
            if self._connections.pop(connection.id, None) is None:
                return False
            for room in self._subscriptions.pop(connection.id, set()):
                self._discard(connection.id, room)
        logger.debug("WS deregistered: %s", connection)
        return True

    async def subscribe(self, connection: Connection, room: Room) -> None:
        async with self._lock:
            if connection.id not in self._connections:
                return
            self._subscriptions[connection.id].add(room)
            self._add(connection.id, room)

    async def unsubscribe(self, connection: Connection, room: Room) -> None:
        async with self._lock:
            subs = self._subscriptions.get(connection.id)
            if subs is None or room not in subs:
                return
            subs.discard(room)
            self._discard(connection.id, room)

    async def unsubscribe_user(self, user_id: UUID, room: Room) -> int:
        """Drop every connection of ``user_id`` from ``room``. Returns how many."""
        async with self._lock:
            removed = 0
            for cid in list(self._rooms.get(room, ())):
                if self._connections[cid].principal.id != user_id:
                    continue
                self._subscriptions[cid].discard(room)
                self._discard(cid, room)
                removed += 1
            return removed

    async def evict(self, user_id: UUID, room: Room) -> None:
        removed = await self.unsubscribe_user(user_id, room)
        if removed:
            logger.debug("Evicted %d connection(s) of %s from %s", removed, user_id, room.key)

    async def fanout(
        self,
        room: Room,
        message: WsOutbound,
        *,
        exclude: UUID | None = None,
    ) -> None:
        """Best-effort delivery to every subscriber of ``room``."""
        async with self._lock:
            targets = [
                self._connections[cid]
                for cid in self._rooms.get(room, ())
                if cid != exclude
            ]
        if not targets:
            return

        raw = message.model_dump_json()
        results = await asyncio.gather(*(c.send_text(raw) for c in targets))
        failed = results.count(False)
        if failed:
            logger.debug(
                "Fanout %s to %s: %d/%d undelivered",
                message.type, room.key, failed, len(targets),
            )

    async def send(self, connection: Connection, message: WsOutbound) -> bool:
        """Deliver to one connection only."""
        return await connection.send_text(message.model_dump_json())

    async def is_subscribed(self, connection: Connection, room: Room) -> bool:
        async with self._lock:
            return room in self._subscriptions.get(connection.id, ())

    async def close(self) -> None:
        """Shutdown: every connection is closed and the index emptied."""
        async with self._lock:
            for connection in self._connections.values():
                connection.mark_closed()
            count = len(self._connections)
            self._connections.clear()
            self._rooms.clear()
            self._subscriptions.clear()
        logger.info("Connection registry closed (%d live connections dropped)", count)

    def __len__(self) -> int:
        return len(self._connections)

    def _add(self, cid: UUID, room: Room) -> None:
        self._rooms.setdefault(room, set()).add(cid)

    def _discard(self, cid: UUID, room: Room) -> None:
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(cid)
        if not members:
            del self._rooms[room]
