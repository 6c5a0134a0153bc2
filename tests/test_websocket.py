"""
Tests for the WebSocket transport

ConnectionManager delivery semantics and an end-to-end run over FastAPI's
TestClient.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from friendchat.config import Settings
from friendchat.main import create_app
from friendchat.models.events import BROADCAST, EventName, Outbound
from friendchat.routers.events import ChatState, Connection, EventRouter
from friendchat.routers.websocket import ConnectionManager


def fake_socket():
    websocket = MagicMock()
    websocket.accept = AsyncMock()
    websocket.send_json = AsyncMock()
    return websocket


class TestConnectionManager:
    """Tests for ConnectionManager."""

    @pytest.fixture
    def manager(self):
        return ConnectionManager()

    @pytest.mark.asyncio
    async def test_connect_assigns_unique_handles(self, manager):
        """Each accepted socket should get its own live handle."""
        first = await manager.connect(fake_socket())
        second = await manager.connect(fake_socket())

        assert first != second
        assert manager.is_live(first) and manager.is_live(second)
        assert manager.count() == 2

    @pytest.mark.asyncio
    async def test_send_to_stale_handle_is_dropped(self, manager):
        """Sends to a forgotten handle should be dropped."""
        handle = await manager.connect(fake_socket())
        manager.disconnect(handle)

        assert await manager.send_personal(handle, {"type": "x"}) is False
        assert not manager.is_live(None)

    @pytest.mark.asyncio
    async def test_failed_send_drops_connection(self, manager):
        """A failed send should forget the connection."""
        websocket = fake_socket()
        websocket.send_json.side_effect = RuntimeError("socket closed")
        handle = await manager.connect(websocket)

        assert await manager.send_personal(handle, {"type": "x"}) is False
        assert not manager.is_live(handle)

    @pytest.mark.asyncio
    async def test_failed_send_reports_dropped_handle(self):
        """A failed send should hand the dropped handle to on_drop."""
        on_drop = MagicMock()
        manager = ConnectionManager(on_drop=on_drop)
        websocket = fake_socket()
        websocket.send_json.side_effect = RuntimeError("socket closed")
        handle = await manager.connect(websocket)

        await manager.send_personal(handle, {"type": "x"})

        on_drop.assert_called_once_with(handle)

    @pytest.mark.asyncio
    async def test_failed_send_marks_user_offline(self):
        """A user whose socket fails on send should no longer show as online."""
        state = ChatState.in_memory(Settings())
        router = EventRouter(state)
        manager = ConnectionManager(on_drop=router.release_handle)
        websocket = fake_socket()
        handle = await manager.connect(websocket)
        router.dispatch(Connection(handle=handle), EventName.LOGIN, {"username": "alice"})
        websocket.send_json.side_effect = RuntimeError("socket closed")

        await manager.broadcast_all({"type": "x"})

        assert not state.presence.is_online("alice")

    @pytest.mark.asyncio
    async def test_deliver_unicast_and_broadcast(self, manager):
        """Unicast should reach one socket, broadcast every socket."""
        a, b = fake_socket(), fake_socket()
        handle_a = await manager.connect(a)
        await manager.connect(b)

        await manager.deliver([
            Outbound(target=handle_a, event="only_a", data=1),
            Outbound(target=BROADCAST, event="everyone", data="hi"),
        ])

        assert [c.args[0]["type"] for c in a.send_json.call_args_list] == ["only_a", "everyone"]
        b.send_json.assert_called_once_with({"type": "everyone", "data": "hi"})


class TestWebSocketEndpoint:
    """End-to-end tests over /ws."""

    @pytest.fixture
    def client(self):
        app = create_app(Settings(global_history_size=10))
        with TestClient(app) as client:
            yield client

    @staticmethod
    def send(ws, event, data):
        ws.send_json({"type": event, "data": data})

    def test_health(self, client):
        """Health endpoint should report healthy."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_friend_and_private_message_flow(self, client):
        """Register, befriend and message over two sockets."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            self.send(alice, EventName.REGISTER, {"username": "alice", "password": "pw"})
            assert alice.receive_json()["type"] == EventName.REGISTER_SUCCESS

            self.send(bob, EventName.LOGIN, {"username": "bob", "password": "pw"})
            login = bob.receive_json()
            assert login["type"] == EventName.LOGIN_SUCCESS
            assert login["data"]["friends"] == []

            self.send(bob, EventName.SEND_FRIEND_REQUEST, "alice")
            assert alice.receive_json()["type"] == EventName.NEW_FRIEND_REQUEST
            assert bob.receive_json() == {"type": EventName.FRIEND_REQUEST_SENT, "data": "alice"}

            self.send(alice, EventName.ACCEPT_FRIEND_REQUEST, "bob")
            assert alice.receive_json()["type"] == EventName.FRIEND_ADDED
            assert bob.receive_json()["type"] == EventName.FRIEND_ADDED
            update = alice.receive_json()
            assert update["type"] == EventName.UPDATE_FRIENDS
            assert update["data"][0]["username"] == "bob"

            self.send(alice, EventName.PRIVATE_MESSAGE, {"to": "bob", "text": "hi"})
            assert bob.receive_json()["data"]["text"] == "hi"
            assert alice.receive_json()["type"] == EventName.NEW_PRIVATE_MESSAGE

            self.send(bob, EventName.LOAD_CHAT_HISTORY, "alice")
            history = bob.receive_json()
            assert history["type"] == EventName.CHAT_HISTORY
            assert [m["text"] for m in history["data"]["messages"]] == ["hi"]

    def test_global_message_reaches_everyone(self, client):
        """Global message should reach unauthenticated sockets too."""
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as lurker:
            self.send(alice, EventName.LOGIN, {"username": "alice"})
            alice.receive_json()

            self.send(alice, EventName.GLOBAL_MESSAGE, "hello")

            assert alice.receive_json()["type"] == EventName.NEW_GLOBAL_MESSAGE
            assert lurker.receive_json()["data"]["text"] == "hello"

    def test_garbage_frames_keep_connection_open(self, client):
        """Malformed frames should be skipped without closing the socket."""
        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            ws.send_json(["not", "an", "object"])
            ws.send_json({"type": ["login"], "data": {"username": "alice"}})
            self.send(ws, EventName.SEARCH_USERS, "x")

            self.send(ws, EventName.LOGIN, {"username": "alice"})

            assert ws.receive_json()["type"] == EventName.LOGIN_SUCCESS

    def test_disconnect_marks_offline(self, client):
        """Closing the socket should take the user offline."""
        with client.websocket_connect("/ws") as ws:
            self.send(ws, EventName.LOGIN, {"username": "alice"})
            ws.receive_json()
            assert client.app.state.chat.presence.is_online("alice")

        with client.websocket_connect("/ws") as ws:
            self.send(ws, EventName.LOGIN, {"username": "bob"})
            ws.receive_json()

        assert not client.app.state.chat.presence.is_online("alice")
