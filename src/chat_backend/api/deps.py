"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import UnauthenticatedError
from chat_backend.application.ports.bus import Broadcaster
from chat_backend.application.ports.auth import TokenVerifier
from chat_backend.application.uow import UnitOfWork, UoWFactory
from chat_backend.config import settings
from chat_backend.infrastructure.auth.hs256_verifier import HS256Verifier
from chat_backend.infrastructure.db.uow import open_uow
from chat_backend.infrastructure.ws.registry import ConnectionRegistry
from chat_backend.infrastructure.ws.rooms import RoomMembershipManager
from chat_backend.services import auth_service

_bearer_scheme = HTTPBearer()


def get_uow_factory() -> UoWFactory:
    return open_uow


async def get_uow(
    factory: Annotated[UoWFactory, Depends(get_uow_factory)],
) -> AsyncIterator[UnitOfWork]:
    async with factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]
UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier


VerifierDep = Annotated[TokenVerifier, Depends(get_verifier)]


def get_registry(conn: HTTPConnection) -> ConnectionRegistry:
    return conn.app.state.registry


def get_rooms(conn: HTTPConnection) -> RoomMembershipManager:
    return conn.app.state.rooms


RegistryDep = Annotated[ConnectionRegistry, Depends(get_registry)]
RoomsDep = Annotated[RoomMembershipManager, Depends(get_rooms)]


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: VerifierDep,
    uow: UoWDep,
) -> Principal:
    try:
        return await auth_service.authenticate(credentials.credentials, verifier, uow)
    except UnauthenticatedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: VerifierDep,
    uow: UoWDep,
) -> Principal:
    try:
        return await auth_service.authenticate_admin(credentials.credentials, verifier, uow)
    except UnauthenticatedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
        ) from exc


CurrentAdmin = Annotated[Principal, Depends(get_current_admin)]


def get_broadcaster(conn: HTTPConnection) -> Broadcaster:
    return conn.app.state.broadcaster
