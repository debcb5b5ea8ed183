from __future__ import annotations

from chat_backend.domain.entities.user import User
from chat_backend.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        first_name=model.first_name,
        last_name=model.last_name,
        is_verified=model.is_verified,
        created_at=model.created_at,
        country=model.country,
    )
