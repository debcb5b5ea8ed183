from __future__ import annotations

from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import ForbiddenError


def assert_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
