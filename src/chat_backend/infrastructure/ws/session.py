"""Lifecycle of one accepted WebSocket connection."""
from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect

from chat_backend.infrastructure.ws import protocol
from chat_backend.infrastructure.ws.connection import Connection
from chat_backend.infrastructure.ws.dispatcher import MessageRouter
from chat_backend.infrastructure.ws.registry import ConnectionRegistry

logger = logging.getLogger(__name__)

INBOX_FULL = "Too many pending messages"


class ConnectionSession:
    """Reads frames, processes them one at a time, and cleans up on disconnect.

    The reader only enqueues; a single worker drains the queue, so handlers
    for one connection never overlap. When the reader stops the connection
    is deregistered straight away. A handler already running is left to
    finish (its sends are dropped); frames still queued are discarded. A
    frame arriving while the queue is full is rejected with an error event.
    """

    def __init__(
        self,
        websocket: WebSocket,
        connection: Connection,
        registry: ConnectionRegistry,
        router: MessageRouter,
        *,
        heartbeat_seconds: int = 0,
        queue_size: int = 100,
    ) -> None:
        self._ws = websocket
        self._connection = connection
        self._registry = registry
        self._router = router
        self._heartbeat_seconds = heartbeat_seconds
        self._inbox: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._busy = False

    async def run(self) -> None:
        conn = self._connection
        await self._registry.register(conn)
        logger.info("User connected: %s (connection=%s)", conn.principal.id, conn.id)

        worker = asyncio.create_task(self._work(), name=f"ws-worker-{conn.id}")
        heartbeat: asyncio.Task[None] | None = None
        if self._heartbeat_seconds > 0:
            heartbeat = asyncio.create_task(
                self._heartbeat(), name=f"ws-heartbeat-{conn.id}",
            )
        try:
            await self._read()
        except WebSocketDisconnect:
            pass
        except Exception:
            logger.exception("WS error for %s", conn)
        finally:
            await self._registry.deregister(conn)
            if heartbeat is not None:
                heartbeat.cancel()
            if not self._busy:
                worker.cancel()
            await asyncio.gather(
                worker, *([heartbeat] if heartbeat else []), return_exceptions=True,
            )
            logger.info("User disconnected: %s (connection=%s)", conn.principal.id, conn.id)

    async def _read(self) -> None:
        # Never blocks on the inbox, so a disconnect is always seen right away.
        while True:
            raw = await self._ws.receive_text()
            try:
                self._inbox.put_nowait(raw)
            except asyncio.QueueFull:
                logger.warning("Inbound queue full for %s, frame dropped", self._connection)
                await self._registry.send(self._connection, protocol.error(INBOX_FULL))

    async def _work(self) -> None:
        while True:
            raw = await self._inbox.get()
            self._busy = True
            try:
                await self._router.handle_frame(self._connection, raw)
            finally:
                self._busy = False
            if self._connection.closed:
                return

    async def _heartbeat(self) -> None:
        frame = protocol.heartbeat()
        while True:
            await asyncio.sleep(self._heartbeat_seconds)
            if not await self._registry.send(self._connection, frame):
                return
