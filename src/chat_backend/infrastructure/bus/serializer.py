"""Wire format of fanout envelopes shared between processes."""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from chat_backend.domain.value_objects.rooms import Room, parse_room
from chat_backend.infrastructure.ws.protocol import WsOutbound

OP_FANOUT = "fanout"
OP_EVICT = "evict"


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


@dataclass(frozen=True, slots=True)
class FanoutEnvelope:
    room: Room
    message: WsOutbound
    exclude: UUID | None = None


@dataclass(frozen=True, slots=True)
class EvictEnvelope:
    """Every process drops the user's connections from the room."""

    room: Room
    user_id: UUID


BusEnvelope = FanoutEnvelope | EvictEnvelope


def serialize_fanout(envelope: BusEnvelope) -> str:
    if isinstance(envelope, EvictEnvelope):
        body: dict[str, Any] = {
            "op": OP_EVICT,
            "room": envelope.room.key,
            "user": envelope.user_id,
        }
    else:
        body = {
            "op": OP_FANOUT,
            "room": envelope.room.key,
            "exclude": envelope.exclude,
            "event": envelope.message.type,
            "data": envelope.message.data,
        }
    return json.dumps(body, cls=_Encoder)


def deserialize_fanout(raw: str | bytes) -> BusEnvelope:
    """Raises ValueError/KeyError on a malformed envelope."""
    data = json.loads(raw)
    op = data.get("op", OP_FANOUT)
    room = parse_room(data["room"])
    if op == OP_EVICT:
        return EvictEnvelope(room=room, user_id=UUID(data["user"]))
    if op != OP_FANOUT:
        raise ValueError(f"Unknown envelope op: {op!r}")
    exclude = data.get("exclude")
    return FanoutEnvelope(
        room=room,
        message=WsOutbound(type=data["event"], data=data["data"]),
        exclude=UUID(exclude) if exclude else None,
    )
