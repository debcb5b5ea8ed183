from __future__ import annotations

from chat_backend.domain.entities.message import DirectMessage, GroupMessage
from chat_backend.infrastructure.db.models.message import (
    DirectMessageModel,
    GroupMessageModel,
)


def direct_to_entity(model: DirectMessageModel) -> DirectMessage:
    return DirectMessage(
        id=model.id,
        content=model.content,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        created_at=model.created_at,
    )


def direct_to_model(entity: DirectMessage) -> DirectMessageModel:
    return DirectMessageModel(
        id=entity.id,
        content=entity.content,
        sender_id=entity.sender_id,
        receiver_id=entity.receiver_id,
        created_at=entity.created_at,
    )


def group_to_entity(model: GroupMessageModel) -> GroupMessage:
    return GroupMessage(
        id=model.id,
        content=model.content,
        user_id=model.user_id,
        group_id=model.group_id,
        created_at=model.created_at,
    )


def group_to_model(entity: GroupMessage) -> GroupMessageModel:
    return GroupMessageModel(
        id=entity.id,
        content=entity.content,
        user_id=entity.user_id,
        group_id=entity.group_id,
        created_at=entity.created_at,
    )
