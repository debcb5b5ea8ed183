"""WebSocket end-to-end tests through the ASGI app with an in-memory UoW."""
from __future__ import annotations

import uuid

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from chat_backend.api.deps import get_uow_factory
from chat_backend.app import create_app
from chat_backend.application.exceptions import StorageError
from tests.conftest import FakeUoW, make_token, uow_factory_for


@pytest.fixture
def client(uow: FakeUoW):
    app = create_app()
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory_for(uow)
    with TestClient(app) as client:
        yield client


def send(ws, event_type: str, **data) -> None:
    ws.send_json({"type": event_type, "data": data})


def wait_ready(ws) -> None:
    """Any reply proves the session is registered and its worker is running."""
    send(ws, "ping")
    assert ws.receive_json() == {"type": "error", "data": {"message": "Unknown event: ping"}}


@pytest.mark.parametrize("token", [None, "garbage"])
def test_handshake_rejects_bad_credentials(client, token):
    url = "/ws" if token is None else f"/ws?token={token}"
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(url):
            pass
    assert exc_info.value.code == 4001


def test_handshake_rejects_unverified_user(client, uow):
    user = uow.add_user(is_verified=False)

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(f"/ws?token={make_token(user)}"):
            pass
    assert exc_info.value.code == 4001


def test_handshake_storage_failure(client, uow, alice, monkeypatch):
    async def _broken(user_id):
        raise StorageError("down")

    monkeypatch.setattr(uow.users, "get_by_id", _broken)

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(f"/ws?token={make_token(alice)}"):
            pass
    assert exc_info.value.code == 1011


def test_bearer_header_is_accepted(client, alice):
    headers = {"Authorization": f"Bearer {make_token(alice)}"}
    with client.websocket_connect("/ws", headers=headers) as ws:
        wait_ready(ws)


def test_direct_message(client, uow, alice, bob):
    with client.websocket_connect(f"/ws?token={make_token(alice)}") as a, \
            client.websocket_connect(f"/ws?token={make_token(bob)}") as b:
        wait_ready(a)
        wait_ready(b)

        send(a, "direct-message", receiverId=str(bob.id), content="hi")

        received = b.receive_json()
        sent = a.receive_json()

    [stored] = uow.messages._direct
    assert received["type"] == "direct-message"
    assert received["data"]["content"] == "hi"
    assert received["data"]["senderId"] == str(alice.id)
    assert sent["type"] == "message-sent"
    assert sent["data"]["id"] == str(stored.id)
    assert sent["data"]["receiverId"] == str(bob.id)


def test_join_and_group_message(client, uow, alice, bob, group):
    uow.add_membership(bob.id, group.id)

    with client.websocket_connect(f"/ws?token={make_token(alice)}") as a, \
            client.websocket_connect(f"/ws?token={make_token(bob)}") as b:
        send(b, "join-group", groupId=str(group.id))
        assert b.receive_json() == {"type": "group-joined", "data": {"groupId": str(group.id)}}

        send(a, "join-group", groupId=str(group.id))
        assert a.receive_json() == {"type": "group-joined", "data": {"groupId": str(group.id)}}
        assert b.receive_json() == {
            "type": "user-joined",
            "data": {"groupId": str(group.id), "userId": str(alice.id)},
        }

        send(a, "group-message", groupId=str(group.id), content="hello")
        to_sender = a.receive_json()
        to_member = b.receive_json()

    assert to_sender == to_member
    assert to_sender["type"] == "group-message"
    assert to_sender["data"]["userId"] == str(alice.id)
    assert to_sender["data"]["content"] == "hello"


def test_group_message_from_non_member(client, uow, alice, group):
    with client.websocket_connect(f"/ws?token={make_token(alice)}") as a:
        send(a, "group-message", groupId=str(group.id), content="hi")
        assert a.receive_json() == {
            "type": "error",
            "data": {"message": "You are not a member of this group"},
        }
    assert uow.messages._group == []


def test_invalid_payload(client, alice):
    with client.websocket_connect(f"/ws?token={make_token(alice)}") as a:
        send(a, "join-group", groupId="not-a-uuid")
        assert a.receive_json() == {"type": "error", "data": {"message": "Invalid payload"}}
        send(a, "join-group", groupId=str(uuid.uuid4()))
        assert a.receive_json() == {"type": "error", "data": {"message": "Group not found"}}


def test_rest_leave_drops_live_subscription(client, uow, alice, bob, group):
    uow.add_membership(bob.id, group.id)
    headers = {"Authorization": f"Bearer {make_token(alice)}"}

    with client.websocket_connect(f"/ws?token={make_token(alice)}") as a, \
            client.websocket_connect(f"/ws?token={make_token(bob)}") as b:
        send(b, "join-group", groupId=str(group.id))
        assert b.receive_json()["type"] == "group-joined"
        send(a, "join-group", groupId=str(group.id))
        assert a.receive_json()["type"] == "group-joined"
        assert b.receive_json()["type"] == "user-joined"

        resp = client.post(f"/api/v1/groups/{group.id}/leave", headers=headers)
        assert resp.status_code == 204

        send(b, "group-message", groupId=str(group.id), content="secret")
        assert b.receive_json()["data"]["content"] == "secret"
        # Next frame for alice is the ping reply, not the group message.
        wait_ready(a)
