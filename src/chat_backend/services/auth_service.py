from __future__ import annotations

import logging

from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import UnauthenticatedError
from chat_backend.application.policies.permissions import assert_admin
from chat_backend.application.ports.auth import TokenVerifier
from chat_backend.application.uow import UnitOfWork

logger = logging.getLogger(__name__)


async def authenticate(
    token: str | None,
    verifier: TokenVerifier,
    uow: UnitOfWork,
) -> Principal:
    """Resolve a bearer credential to a live principal.

    The token must verify and name an existing user whose email has been
    verified. StorageError from the lookup propagates unchanged.
    """
    if not token:
        raise UnauthenticatedError("Authentication required")

    principal = await verifier.verify(token)

    user = await uow.users.get_by_id(principal.id)
    if user is None or not user.is_verified:
        raise UnauthenticatedError("Invalid user or email not verified")

    return principal


async def authenticate_admin(
    token: str | None,
    verifier: TokenVerifier,
    uow: UnitOfWork,
) -> Principal:
    """Like ``authenticate``, for the back office: the token must carry the
    admin role and name an existing admin account.
    """
    if not token:
        raise UnauthenticatedError("Authentication required")

    principal = await verifier.verify(token)
    assert_admin(principal)

    admin = await uow.admins.get_by_id(principal.id)
    if admin is None:
        raise UnauthenticatedError("Invalid admin")

    return principal
