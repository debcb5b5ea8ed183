"""Redis Pub/Sub fanout: publish side and subscriber background task."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine
from uuid import UUID

import redis.asyncio as aioredis

from chat_backend.domain.value_objects.rooms import Room
from chat_backend.infrastructure.bus.serializer import (
    BusEnvelope,
    EvictEnvelope,
    FanoutEnvelope,
    deserialize_fanout,
    serialize_fanout,
)
from chat_backend.infrastructure.ws.protocol import WsOutbound
from chat_backend.infrastructure.ws.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class RedisBroadcaster:
    """Implements application.ports.bus.Broadcaster across processes.

    Nothing is delivered locally here: this process receives its own
    publications through its subscriber like every other process. A failed
    publish is logged, never raised: the caller's write has already been
    committed by then.
    """

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def fanout(
        self,
        room: Room,
        message: WsOutbound,
        *,
        exclude: UUID | None = None,
    ) -> None:
        await self._publish(FanoutEnvelope(room=room, message=message, exclude=exclude))

    async def evict(self, user_id: UUID, room: Room) -> None:
        await self._publish(EvictEnvelope(room=room, user_id=user_id))

    async def _publish(self, envelope: BusEnvelope) -> None:
        try:
            await self._redis.publish(self._channel, serialize_fanout(envelope))
        except aioredis.RedisError:
            logger.exception(
                "Fanout publish to %s failed (room=%s)", self._channel, envelope.room.key,
            )


async def deliver_locally(registry: ConnectionRegistry, envelope: BusEnvelope) -> None:
    """Apply one envelope received from the bus to this process's connections."""
    if isinstance(envelope, EvictEnvelope):
        await registry.evict(envelope.user_id, envelope.room)
    else:
        await registry.fanout(envelope.room, envelope.message, exclude=envelope.exclude)


OnEnvelopeCallback = Callable[[BusEnvelope], Coroutine[Any, Any, None]]


class RedisPubSubSubscriber:
    """Background task that listens to a Redis channel and dispatches envelopes."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEnvelopeCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-pubsub-subscriber")
        logger.info("Redis Pub/Sub subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Redis Pub/Sub subscriber stopped")

    async def handle_message(self, message: dict[str, Any]) -> None:
        if message["type"] != "message":
            return
        try:
            envelope = deserialize_fanout(message["data"])
        except (KeyError, ValueError):
            logger.warning("Dropping malformed fanout envelope", exc_info=True)
            return
        try:
            await self._callback(envelope)
        except Exception:
            logger.exception("Error processing pubsub message")

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                await self.handle_message(message)
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()
