"""Import all models so Alembic can discover them via Base.metadata."""
from chat_backend.infrastructure.db.models.admin import AdminModel
from chat_backend.infrastructure.db.models.group import GroupModel
from chat_backend.infrastructure.db.models.membership import GroupMemberModel
from chat_backend.infrastructure.db.models.message import (
    DirectMessageModel,
    GroupMessageModel,
)
from chat_backend.infrastructure.db.models.user import UserModel

__all__ = [
    "AdminModel",
    "DirectMessageModel",
    "GroupMemberModel",
    "GroupMessageModel",
    "GroupModel",
    "UserModel",
]
