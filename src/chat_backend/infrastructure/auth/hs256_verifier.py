from __future__ import annotations

from uuid import UUID

import jwt

from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import UnauthenticatedError
from chat_backend.domain.value_objects.enums import Role


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise UnauthenticatedError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise UnauthenticatedError("Invalid token") from exc

        try:
            subject = UUID(str(payload.get("id", payload.get("sub"))))
        except ValueError as exc:
            raise UnauthenticatedError("Invalid token") from exc

        role_raw = payload.get("role", Role.USER)
        role = Role(role_raw) if role_raw in Role.__members__.values() else Role.USER
        return Principal(
            id=subject,
            email=payload.get("email", ""),
            role=role,
        )
