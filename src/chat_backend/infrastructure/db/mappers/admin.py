from __future__ import annotations

from chat_backend.domain.entities.admin import Admin
from chat_backend.infrastructure.db.models.admin import AdminModel


def model_to_entity(model: AdminModel) -> Admin:
    return Admin(
        id=model.id,
        email=model.email,
        first_name=model.first_name,
        last_name=model.last_name,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
