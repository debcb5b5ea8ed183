"""WebSocket message envelope models.

Every frame is ``{"type": <event name>, "data": {...}}``. Inbound frames are
parsed into one of a closed set of event models; outbound frames are built
by the helper constructors at the bottom of this module.
"""
from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from chat_backend.config import settings
from chat_backend.domain.entities.message import DirectMessage, GroupMessage


class InboundEvent(StrEnum):
    DIRECT_MESSAGE = "direct-message"
    JOIN_GROUP = "join-group"
    LEAVE_GROUP = "leave-group"
    GROUP_MESSAGE = "group-message"


class OutboundEvent(StrEnum):
    DIRECT_MESSAGE = "direct-message"
    MESSAGE_SENT = "message-sent"
    GROUP_JOINED = "group-joined"
    USER_JOINED = "user-joined"
    GROUP_LEFT = "group-left"
    USER_LEFT = "user-left"
    GROUP_MESSAGE = "group-message"
    ERROR = "error"
    HEARTBEAT = "heartbeat"


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


Content = Annotated[str, Field(min_length=1, max_length=settings.MESSAGE_MAX_LENGTH)]


# Client → Server

class DirectMessageData(_Payload):
    receiver_id: UUID
    content: Content


class GroupRef(_Payload):
    group_id: UUID


class GroupMessageData(_Payload):
    group_id: UUID
    content: Content


class DirectMessageIn(BaseModel):
    type: Literal["direct-message"]
    data: DirectMessageData


class JoinGroupIn(BaseModel):
    type: Literal["join-group"]
    data: GroupRef


class LeaveGroupIn(BaseModel):
    type: Literal["leave-group"]
    data: GroupRef


class GroupMessageIn(BaseModel):
    type: Literal["group-message"]
    data: GroupMessageData


WsInbound = Annotated[
    DirectMessageIn | JoinGroupIn | LeaveGroupIn | GroupMessageIn,
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[WsInbound] = TypeAdapter(WsInbound)


class _Envelope(BaseModel):
    type: str
    data: dict[str, Any] = {}


class UnknownEventError(ValueError):
    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(event_type)


def parse_inbound(raw: str | bytes) -> WsInbound:
    """Parse one client frame.

    Raises UnknownEventError for a well-formed frame naming an event outside
    the inbound set, pydantic.ValidationError for anything malformed.
    """
    envelope = _Envelope.model_validate_json(raw)
    if envelope.type not in InboundEvent.__members__.values():
        raise UnknownEventError(envelope.type)
    return _inbound_adapter.validate_python(envelope.model_dump())


# Server → Client

class WsOutbound(BaseModel):
    type: OutboundEvent
    data: dict[str, Any] = {}


def _outbound(event: OutboundEvent, **fields: Any) -> WsOutbound:
    data = {to_camel(k): v for k, v in fields.items()}
    return WsOutbound(type=event, data=_jsonable(data))


def _jsonable(data: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, UUID):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        out[key] = value
    return out


def direct_message(msg: DirectMessage) -> WsOutbound:
    """Copy delivered to the receiver."""
    return _outbound(
        OutboundEvent.DIRECT_MESSAGE,
        id=msg.id,
        content=msg.content,
        sender_id=msg.sender_id,
        created_at=msg.created_at,
    )


def message_sent(msg: DirectMessage) -> WsOutbound:
    """Acknowledgement delivered to the sender."""
    return _outbound(
        OutboundEvent.MESSAGE_SENT,
        id=msg.id,
        content=msg.content,
        receiver_id=msg.receiver_id,
        created_at=msg.created_at,
    )


def group_message(msg: GroupMessage) -> WsOutbound:
    return _outbound(
        OutboundEvent.GROUP_MESSAGE,
        id=msg.id,
        content=msg.content,
        user_id=msg.user_id,
        group_id=msg.group_id,
        created_at=msg.created_at,
    )


def group_joined(group_id: UUID) -> WsOutbound:
    return _outbound(OutboundEvent.GROUP_JOINED, group_id=group_id)


def user_joined(group_id: UUID, user_id: UUID) -> WsOutbound:
    return _outbound(OutboundEvent.USER_JOINED, group_id=group_id, user_id=user_id)


def group_left(group_id: UUID) -> WsOutbound:
    return _outbound(OutboundEvent.GROUP_LEFT, group_id=group_id)


def user_left(group_id: UUID, user_id: UUID) -> WsOutbound:
    return _outbound(OutboundEvent.USER_LEFT, group_id=group_id, user_id=user_id)


def error(message: str) -> WsOutbound:
    return _outbound(OutboundEvent.ERROR, message=message)


def heartbeat() -> WsOutbound:
    return WsOutbound(type=OutboundEvent.HEARTBEAT)
