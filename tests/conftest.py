"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator
from uuid import UUID

import jwt
import pytest
from fastapi import WebSocketDisconnect

from chat_backend.application.dto.admin import GroupStatsDTO, UserGroupDTO, UserStatsDTO
from chat_backend.application.dto.group import GroupMemberDTO, GroupSummaryDTO
from chat_backend.application.dto.principal import Principal
from chat_backend.application.exceptions import StorageError
from chat_backend.application.uow import UoWFactory
from chat_backend.config import settings
from chat_backend.domain.entities.admin import Admin
from chat_backend.domain.entities.group import Group
from chat_backend.domain.entities.membership import Membership
from chat_backend.domain.entities.message import DirectMessage, GroupMessage
from chat_backend.domain.entities.user import User
from chat_backend.domain.value_objects.enums import Role


def make_user(
    *,
    user_id: UUID | None = None,
    email: str | None = None,
    is_verified: bool = True,
) -> User:
    uid = user_id or uuid.uuid4()
    return User(
        id=uid,
        email=email or f"{uid.hex[:8]}@example.com",
        first_name="Test",
        last_name="User",
        is_verified=is_verified,
        created_at=datetime.now(timezone.utc),
    )


def make_group(*, group_id: UUID | None = None, name: str = "general") -> Group:
    now = datetime.now(timezone.utc)
    return Group(id=group_id or uuid.uuid4(), name=name, created_at=now, updated_at=now)


def make_admin(*, admin_id: UUID | None = None) -> Admin:
    aid = admin_id or uuid.uuid4()
    now = datetime.now(timezone.utc)
    return Admin(
        id=aid,
        email=f"admin-{aid.hex[:8]}@example.com",
        first_name="Ada",
        last_name="Admin",
        created_at=now,
        updated_at=now,
    )


def principal_for(user: User, role: Role = Role.USER) -> Principal:
    return Principal(id=user.id, email=user.email, role=role)


def make_token(user: User | Admin, role: Role = Role.USER) -> str:
    return jwt.encode(
        {"id": str(user.id), "email": user.email, "role": str(role)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


@dataclass
class FakeUserReader:
    _store: dict[UUID, User] = field(default_factory=dict)
    _uow: FakeUoW | None = field(default=None, repr=False, compare=False)

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._store.get(user_id)

    async def list_verified(self, *, exclude_id: UUID | None = None) -> list[User]:
        return [u for u in self._store.values() if u.is_verified and u.id != exclude_id]

    async def list_with_stats(self) -> list[UserStatsDTO]:
        assert self._uow is not None
        direct = self._uow.messages._direct
        rows = self._uow.memberships._rows.values()
        return [
            UserStatsDTO(
                id=u.id,
                email=u.email,
                first_name=u.first_name,
                last_name=u.last_name,
                country=u.country,
                is_verified=u.is_verified,
                created_at=u.created_at,
                sent_message_count=sum(1 for m in direct if m.sender_id == u.id),
                group_count=sum(1 for m in rows if m.user_id == u.id),
            )
            for u in self._store.values()
        ]


@dataclass
class FakeAdminReader:
    _store: dict[UUID, Admin] = field(default_factory=dict)

    async def get_by_id(self, admin_id: UUID) -> Admin | None:
        return self._store.get(admin_id)

    async def list_all(self) -> list[Admin]:
        return list(self._store.values())


@dataclass
class FakeMembershipReader:
    _rows: dict[tuple[UUID, UUID], Membership] = field(default_factory=dict)
    _users: FakeUserReader | None = None
    _groups: FakeGroupReader | None = field(default=None, repr=False, compare=False)

    async def get(self, user_id: UUID, group_id: UUID) -> Membership | None:
        return self._rows.get((user_id, group_id))

    async def list_members(self, group_id: UUID) -> list[GroupMemberDTO]:
        members = []
        for m in self._rows.values():
            if m.group_id != group_id:
                continue
            user = self._users._store[m.user_id] if self._users else make_user(user_id=m.user_id)
            members.append(
                GroupMemberDTO(
                    user_id=m.user_id,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    joined_at=m.joined_at,
                )
            )
        return members

    async def list_groups_of_user(self, user_id: UUID) -> list[UserGroupDTO]:
        assert self._groups is not None
        return [
            UserGroupDTO(
                id=m.group_id,
                name=self._groups._store[m.group_id].name,
                joined_at=m.joined_at,
            )
            for m in self._rows.values()
            if m.user_id == user_id
        ]


@dataclass
class FakeMembershipWriter:
    _reader: FakeMembershipReader
    fail: bool = False

    async def create_if_not_exists(self, membership: Membership) -> tuple[Membership, bool]:
        if self.fail:
            raise StorageError("Storage failure")
        key = (membership.user_id, membership.group_id)
        existing = self._reader._rows.get(key)
        if existing is not None:
            return existing, False
        self._reader._rows[key] = membership
        return membership, True

    async def delete(self, user_id: UUID, group_id: UUID) -> bool:
        return self._reader._rows.pop((user_id, group_id), None) is not None


@dataclass
class FakeGroupReader:
    _store: dict[UUID, Group] = field(default_factory=dict)
    _memberships: FakeMembershipReader | None = None
    _messages: FakeMessageReader | None = field(default=None, repr=False, compare=False)

    async def get_by_id(self, group_id: UUID) -> Group | None:
        return self._store.get(group_id)

    async def list_for_user(self, user_id: UUID) -> list[GroupSummaryDTO]:
        rows = self._memberships._rows.values() if self._memberships else []
        result = []
        for m in rows:
            if m.user_id != user_id:
                continue
            group = self._store[m.group_id]
            count = sum(1 for r in rows if r.group_id == group.id)
            result.append(
                GroupSummaryDTO(
                    id=group.id,
                    name=group.name,
                    created_at=group.created_at,
                    updated_at=group.updated_at,
                    member_count=count,
                    joined_at=m.joined_at,
                )
            )
        return result

    async def list_with_stats(self) -> list[GroupStatsDTO]:
        rows = list(self._memberships._rows.values()) if self._memberships else []
        messages = self._messages._group if self._messages else []
        return [
            GroupStatsDTO(
                id=g.id,
                name=g.name,
                created_at=g.created_at,
                updated_at=g.updated_at,
                member_count=sum(1 for r in rows if r.group_id == g.id),
                message_count=sum(1 for m in messages if m.group_id == g.id),
            )
            for g in self._store.values()
        ]


@dataclass
class FakeGroupWriter:
    _reader: FakeGroupReader

    async def create(self, group: Group) -> Group:
        self._reader._store[group.id] = group
        return group


@dataclass
class FakeMessageReader:
    _direct: list[DirectMessage] = field(default_factory=list)
    _group: list[GroupMessage] = field(default_factory=list)

    async def list_direct(
        self, user_id: UUID, peer_id: UUID, *, cursor: str | None = None, limit: int = 50,
    ) -> list[DirectMessage]:
        pair = {user_id, peer_id}
        return [m for m in self._direct if {m.sender_id, m.receiver_id} == pair][:limit]

    async def list_group(
        self, group_id: UUID, *, cursor: str | None = None, limit: int = 50,
    ) -> list[GroupMessage]:
        return [m for m in self._group if m.group_id == group_id][:limit]

    async def count_group(self, group_id: UUID) -> int:
        return sum(1 for m in self._group if m.group_id == group_id)


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    fail: bool = False

    async def create_direct(self, message: DirectMessage) -> DirectMessage:
        if self.fail:
            raise StorageError("Storage failure")
        self._reader._direct.append(message)
        return message

    async def create_group(self, message: GroupMessage) -> GroupMessage:
        if self.fail:
            raise StorageError("Storage failure")
        self._reader._group.append(message)
        return message


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    admins: FakeAdminReader = field(default_factory=FakeAdminReader)
    memberships: FakeMembershipReader = field(default_factory=FakeMembershipReader)
    memberships_w: FakeMembershipWriter | None = None
    groups: FakeGroupReader = field(default_factory=FakeGroupReader)
    groups_w: FakeGroupWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _commits: int = 0

    def __post_init__(self) -> None:
        self.users._uow = self
        self.memberships._users = self.users
        self.groups._memberships = self.memberships
        self.memberships._groups = self.groups
        self.groups._messages = self.messages
        if self.memberships_w is None:
            self.memberships_w = FakeMembershipWriter(self.memberships)
        if self.groups_w is None:
            self.groups_w = FakeGroupWriter(self.groups)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    def add_user(self, user: User | None = None, **kwargs: Any) -> User:
        user = user or make_user(**kwargs)
        self.users._store[user.id] = user
        return user

    def add_admin(self, admin: Admin | None = None, **kwargs: Any) -> Admin:
        admin = admin or make_admin(**kwargs)
        self.admins._store[admin.id] = admin
        return admin

    def add_group(self, group: Group | None = None, **kwargs: Any) -> Group:
        group = group or make_group(**kwargs)
        self.groups._store[group.id] = group
        return group

    def add_membership(self, user_id: UUID, group_id: UUID) -> Membership:
        membership = Membership(
            user_id=user_id, group_id=group_id, joined_at=datetime.now(timezone.utc),
        )
        self.memberships._rows[(user_id, group_id)] = membership
        return membership

    @property
    def _committed(self) -> bool:
        return self._commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._commits += 1

    async def rollback(self) -> None:
        pass


def uow_factory_for(uow: FakeUoW) -> UoWFactory:
    @asynccontextmanager
    async def _open() -> AsyncIterator[FakeUoW]:
        yield uow

    return _open  # type: ignore[return-value]


class FakeWebSocket:
    """Records frames sent to it; feeds frames pushed with ``push``."""

    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail = fail
        self._incoming: asyncio.Queue[str | None] = asyncio.Queue()

    async def send_text(self, raw: str) -> None:
        if self.fail:
            raise RuntimeError("socket is gone")
        self.sent.append(json.loads(raw))

    async def receive_text(self) -> str:
        item = await self._incoming.get()
        if item is None:
            raise WebSocketDisconnect(code=1000)
        return item

    def push(self, event_type: str, data: dict[str, Any]) -> None:
        self._incoming.put_nowait(json.dumps({"type": event_type, "data": data}))

    def disconnect(self) -> None:
        self._incoming.put_nowait(None)

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        if event_type is None:
            return self.sent
        return [f for f in self.sent if f["type"] == event_type]


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def alice(uow: FakeUoW) -> User:
    return uow.add_user(email="alice@example.com")


@pytest.fixture
def bob(uow: FakeUoW) -> User:
    return uow.add_user(email="bob@example.com")


@pytest.fixture
def group(uow: FakeUoW) -> Group:
    return uow.add_group(name="general")
