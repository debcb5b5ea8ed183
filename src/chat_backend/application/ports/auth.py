from __future__ import annotations

from typing import Protocol

from chat_backend.application.dto.principal import Principal


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Principal:
        """Decode and check ``token``. Raises UnauthenticatedError on rejection."""
        ...
