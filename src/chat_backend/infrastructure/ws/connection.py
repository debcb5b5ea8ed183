"""One authenticated WebSocket as seen by the registry."""
from __future__ import annotations

import asyncio
import logging
import uuid

from fastapi import WebSocket

from chat_backend.application.dto.principal import Principal

logger = logging.getLogger(__name__)


class Connection:
    """A live socket bound to exactly one principal for its whole lifetime.

    Sends are serialized per connection. Once ``mark_closed`` has been called
    every further send is dropped and reported as undelivered.
    """

    def __init__(self, websocket: WebSocket, principal: Principal) -> None:
        self.id = uuid.uuid4()
        self.principal = principal
        self._ws = websocket
        self._send_lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def mark_closed(self) -> None:
        self._closed = True

    async def send_text(self, raw: str) -> bool:
        async with self._send_lock:
            if self._closed:
                return False
            try:
                await self._ws.send_text(raw)
            except Exception:
                logger.debug("WS send failed for connection %s", self.id, exc_info=True)
                return False
            return True

    def __repr__(self) -> str:
        return f"<Connection {self.id} user={self.principal.id}>"
