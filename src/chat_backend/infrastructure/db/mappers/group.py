from __future__ import annotations

from chat_backend.domain.entities.group import Group
from chat_backend.infrastructure.db.models.group import GroupModel


def model_to_entity(model: GroupModel) -> Group:
    return Group(
        id=model.id,
        name=model.name,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Group) -> GroupModel:
    return GroupModel(
        id=entity.id,
        name=entity.name,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
