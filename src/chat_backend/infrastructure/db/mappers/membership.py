from __future__ import annotations

from chat_backend.domain.entities.membership import Membership
from chat_backend.infrastructure.db.models.membership import GroupMemberModel


def model_to_entity(model: GroupMemberModel) -> Membership:
    return Membership(
        user_id=model.user_id,
        group_id=model.group_id,
        joined_at=model.joined_at,
    )
