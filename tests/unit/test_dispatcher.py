from __future__ import annotations

import json
import uuid

import pytest

from chat_backend.domain.value_objects.rooms import GroupRoom
from chat_backend.infrastructure.ws.connection import Connection
from chat_backend.infrastructure.ws.dispatcher import MessageRouter
from chat_backend.infrastructure.ws.registry import ConnectionRegistry
from chat_backend.infrastructure.ws.rooms import RoomMembershipManager
from tests.conftest import FakeWebSocket, principal_for, uow_factory_for


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def router(registry, uow) -> MessageRouter:
    rooms = RoomMembershipManager(registry, registry)
    return MessageRouter(registry, rooms, registry, uow_factory_for(uow))


@pytest.fixture
def connect(registry):
    async def _connect(user) -> tuple[Connection, FakeWebSocket]:
        ws = FakeWebSocket()
        conn = Connection(ws, principal_for(user))
        await registry.register(conn)
        return conn, ws

    return _connect


def _frame(event_type: str, **data) -> str:
    return json.dumps({"type": event_type, "data": data})


@pytest.mark.asyncio
async def test_direct_message_scenario(router, connect, uow, alice, bob):
    a, a_ws = await connect(alice)
    b, b_ws = await connect(bob)

    await router.handle_frame(
        a, _frame("direct-message", receiverId=str(bob.id), content="hi"),
    )

    assert len(uow.messages._direct) == 1
    stored = uow.messages._direct[0]
    assert stored.sender_id == alice.id and stored.receiver_id == bob.id

    assert b_ws.sent == [
        {
            "type": "direct-message",
            "data": {
                "id": str(stored.id),
                "content": "hi",
                "senderId": str(alice.id),
                "createdAt": stored.created_at.isoformat(),
            },
        }
    ]
    assert a_ws.sent == [
        {
            "type": "message-sent",
            "data": {
                "id": str(stored.id),
                "content": "hi",
                "receiverId": str(bob.id),
                "createdAt": stored.created_at.isoformat(),
            },
        }
    ]


@pytest.mark.asyncio
async def test_direct_message_reaches_every_receiver_device(router, connect, alice, bob):
    a, _ = await connect(alice)
    _, phone_ws = await connect(bob)
    _, laptop_ws = await connect(bob)

    await router.handle_frame(
        a, _frame("direct-message", receiverId=str(bob.id), content="hi"),
    )

    assert len(phone_ws.events("direct-message")) == 1
    assert len(laptop_ws.events("direct-message")) == 1


@pytest.mark.asyncio
async def test_direct_message_to_unknown_user(router, connect, uow, alice):
    a, a_ws = await connect(alice)

    await router.handle_frame(
        a, _frame("direct-message", receiverId=str(uuid.uuid4()), content="hi"),
    )

    assert uow.messages._direct == []
    assert a_ws.sent == [{"type": "error", "data": {"message": "Receiver not found"}}]


@pytest.mark.asyncio
async def test_join_then_group_message_scenario(router, connect, registry, uow, alice, bob, group):
    uow.add_membership(bob.id, group.id)
    a, a_ws = await connect(alice)
    b, b_ws = await connect(bob)
    await registry.subscribe(b, GroupRoom(group.id))

    await router.handle_frame(a, _frame("join-group", groupId=str(group.id)))
    await router.handle_frame(
        a, _frame("group-message", groupId=str(group.id), content="hello"),
    )

    assert (alice.id, group.id) in uow.memberships._rows
    assert len(uow.messages._group) == 1
    stored = uow.messages._group[0]

    assert [f["type"] for f in a_ws.sent] == ["group-joined", "group-message"]
    assert [f["type"] for f in b_ws.sent] == ["user-joined", "group-message"]
    assert b_ws.sent[0]["data"] == {"groupId": str(group.id), "userId": str(alice.id)}
    expected = {
        "id": str(stored.id),
        "content": "hello",
        "userId": str(alice.id),
        "groupId": str(group.id),
        "createdAt": stored.created_at.isoformat(),
    }
    assert a_ws.sent[1]["data"] == expected
    assert b_ws.sent[1]["data"] == expected


@pytest.mark.asyncio
async def test_rejoin_is_idempotent_but_announces_again(router, connect, registry, uow, alice, bob, group):
    uow.add_membership(bob.id, group.id)
    a, a_ws = await connect(alice)
    b, b_ws = await connect(bob)
    await registry.subscribe(b, GroupRoom(group.id))

    await router.handle_frame(a, _frame("join-group", groupId=str(group.id)))
    await router.handle_frame(a, _frame("join-group", groupId=str(group.id)))

    assert len(uow.memberships._rows) == 2
    assert len(a_ws.events("group-joined")) == 2
    assert len(b_ws.events("user-joined")) == 2


@pytest.mark.asyncio
async def test_join_unknown_group(router, connect, registry, alice):
    a, a_ws = await connect(alice)
    group_id = uuid.uuid4()

    await router.handle_frame(a, _frame("join-group", groupId=str(group_id)))

    assert a_ws.sent == [{"type": "error", "data": {"message": "Group not found"}}]
    assert await registry.is_subscribed(a, GroupRoom(group_id)) is False


@pytest.mark.asyncio
async def test_leave_group(router, connect, registry, uow, alice, bob, group):
    uow.add_membership(alice.id, group.id)
    uow.add_membership(bob.id, group.id)
    a, a_ws = await connect(alice)
    b, b_ws = await connect(bob)
    room = GroupRoom(group.id)
    await registry.subscribe(a, room)
    await registry.subscribe(b, room)

    await router.handle_frame(a, _frame("leave-group", groupId=str(group.id)))

    assert (alice.id, group.id) not in uow.memberships._rows
    assert await registry.is_subscribed(a, room) is False
    assert a_ws.sent == [{"type": "group-left", "data": {"groupId": str(group.id)}}]
    assert b_ws.sent == [
        {"type": "user-left", "data": {"groupId": str(group.id), "userId": str(alice.id)}}
    ]


@pytest.mark.asyncio
async def test_leave_without_membership_emits_only_error(router, connect, registry, uow, alice, bob, group):
    uow.add_membership(bob.id, group.id)
    a, a_ws = await connect(alice)
    b, b_ws = await connect(bob)
    await registry.subscribe(b, GroupRoom(group.id))

    await router.handle_frame(a, _frame("leave-group", groupId=str(group.id)))

    assert a_ws.sent == [{"type": "error", "data": {"message": "Not a member of this group"}}]
    assert b_ws.sent == []


@pytest.mark.asyncio
async def test_group_message_from_non_member(router, connect, registry, uow, alice, bob, group):
    uow.add_membership(bob.id, group.id)
    a, a_ws = await connect(alice)
    b, b_ws = await connect(bob)
    await registry.subscribe(b, GroupRoom(group.id))

    await router.handle_frame(
        a, _frame("group-message", groupId=str(group.id), content="let me in"),
    )

    assert uow.messages._group == []
    assert a_ws.sent == [
        {"type": "error", "data": {"message": "You are not a member of this group"}}
    ]
    assert b_ws.sent == []


@pytest.mark.asyncio
async def test_storage_failure_is_opaque(router, connect, uow, alice, bob, caplog):
    uow.messages_w.fail = True
    a, a_ws = await connect(alice)
    _, b_ws = await connect(bob)

    await router.handle_frame(
        a, _frame("direct-message", receiverId=str(bob.id), content="hi"),
    )

    assert a_ws.sent == [{"type": "error", "data": {"message": "Failed to send message"}}]
    assert b_ws.sent == []
    assert "Storage failure handling direct-message" in caplog.text


@pytest.mark.asyncio
async def test_storage_failure_on_join(router, connect, uow, alice, group):
    uow.memberships_w.fail = True
    a, a_ws = await connect(alice)

    await router.handle_frame(a, _frame("join-group", groupId=str(group.id)))

    assert a_ws.sent == [{"type": "error", "data": {"message": "Failed to join group"}}]


@pytest.mark.asyncio
async def test_malformed_frames(router, connect, alice):
    a, a_ws = await connect(alice)

    await router.handle_frame(a, "not json")
    await router.handle_frame(a, _frame("direct-message", receiverId="nope", content="hi"))
    await router.handle_frame(a, _frame("group-message", groupId=str(uuid.uuid4()), content=""))
    await router.handle_frame(a, _frame("typing", groupId=str(uuid.uuid4())))

    assert [f["data"]["message"] for f in a_ws.sent] == [
        "Invalid payload",
        "Invalid payload",
        "Invalid payload",
        "Unknown event: typing",
    ]


@pytest.mark.asyncio
async def test_results_for_vanished_connection_are_dropped(router, connect, registry, uow, alice, bob):
    a, a_ws = await connect(alice)
    _, b_ws = await connect(bob)
    await registry.deregister(a)

    await router.handle_frame(
        a, _frame("direct-message", receiverId=str(bob.id), content="late"),
    )

    assert len(uow.messages._direct) == 1
    assert len(b_ws.events("direct-message")) == 1
    assert a_ws.sent == []


@pytest.mark.asyncio
async def test_leave_drops_every_device_of_the_user(
    router, connect, registry, uow, alice, bob, group,
):
    uow.add_membership(alice.id, group.id)
    uow.add_membership(bob.id, group.id)
    phone, phone_ws = await connect(alice)
    laptop, laptop_ws = await connect(alice)
    b, b_ws = await connect(bob)
    room = GroupRoom(group.id)
    for conn in (phone, laptop, b):
        await registry.subscribe(conn, room)

    await router.handle_frame(phone, _frame("leave-group", groupId=str(group.id)))
    await router.handle_frame(
        b, _frame("group-message", groupId=str(group.id), content="secret"),
    )

    assert await registry.is_subscribed(laptop, room) is False
    assert phone_ws.events("group-message") == []
    assert laptop_ws.events("group-message") == []
    assert len(phone_ws.events("group-left")) == 1
    assert len(b_ws.events("user-left")) == 1
    assert len(b_ws.events("group-message")) == 1
