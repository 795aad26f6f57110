"""
Unit tests for the chat connection manager.

Tests cover:
- Connecting and disconnecting sockets
- Joining and switching collaboration rooms
- Broadcasting only to the target room
- Dropping sockets that fail to receive
"""

from typing import Any, Dict, List

import pytest
from fastapi import WebSocketDisconnect

from plannora.services.chat_manager import ConnectionManager
from tests.helpers import dead_peer_websocket


class FakeWebSocket:
    """Records what the manager sends."""

    def __init__(self):
        self.accepted = False
        self.sent: List[Dict[str, Any]] = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        self.sent.append(data)


class BrokenWebSocket(FakeWebSocket):
    """Socket whose peer went away."""

    async def send_json(self, data):
        raise WebSocketDisconnect(code=1006)


@pytest.fixture
def manager():
    return ConnectionManager()


class TestConnections:
    """Test connection bookkeeping"""

    @pytest.mark.asyncio
    async def test_connect_accepts_socket(self, manager):
        websocket = FakeWebSocket()

        await manager.connect(websocket)

        assert websocket.accepted is True
        assert manager.get_total_connections() == 1
        assert manager.room_of(websocket) is None

    @pytest.mark.asyncio
    async def test_join_and_disconnect(self, manager):
        websocket = FakeWebSocket()
        await manager.connect(websocket)

        manager.join(websocket, "room-1", "user-1")

        assert manager.room_of(websocket) == "room-1"
        assert manager.user_of(websocket) == "user-1"
        assert manager.get_subscriber_count("room-1") == 1

        manager.disconnect(websocket)

        assert manager.get_total_connections() == 0
        assert manager.get_subscriber_count("room-1") == 0
        assert "room-1" not in manager.rooms

    @pytest.mark.asyncio
    async def test_disconnect_twice_is_harmless(self, manager):
        websocket = FakeWebSocket()
        await manager.connect(websocket)

        manager.disconnect(websocket)
        manager.disconnect(websocket)

        assert manager.get_total_connections() == 0

    @pytest.mark.asyncio
    async def test_join_other_room_leaves_previous(self, manager):
        websocket = FakeWebSocket()
        await manager.connect(websocket)

        manager.join(websocket, "room-1", "user-1")
        manager.join(websocket, "room-2", "user-1")

        assert manager.get_subscriber_count("room-1") == 0
        assert manager.get_subscriber_count("room-2") == 1


class TestBroadcast:
    """Test room broadcasts"""

    @pytest.mark.asyncio
    async def test_broadcast_reaches_room_only(self, manager):
        first, second, outsider = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
        for websocket in (first, second, outsider):
            await manager.connect(websocket)
        manager.join(first, "room-1", "user-1")
        manager.join(second, "room-1", "user-2")
        manager.join(outsider, "room-2", "user-3")

        delivered = await manager.broadcast("room-1", {"type": "new_message"})

        assert delivered == 2
        assert first.sent == [{"type": "new_message"}]
        assert second.sent == [{"type": "new_message"}]
        assert outsider.sent == []

    @pytest.mark.asyncio
    async def test_broadcast_to_empty_room(self, manager):
        assert await manager.broadcast("nobody-here", {"type": "new_message"}) == 0

    @pytest.mark.asyncio
    async def test_failed_sockets_are_dropped(self, manager):
        healthy, broken = FakeWebSocket(), BrokenWebSocket()
        for websocket in (healthy, broken):
            await manager.connect(websocket)
            manager.join(websocket, "room-1", "user")

        delivered = await manager.broadcast("room-1", {"type": "new_message"})

        assert delivered == 1
        assert manager.get_subscriber_count("room-1") == 1
        assert manager.get_total_connections() == 1

    @pytest.mark.asyncio
    async def test_transport_failure_drops_socket(self, manager):
        healthy, dead = FakeWebSocket(), dead_peer_websocket()
        for websocket in (healthy, dead):
            await manager.connect(websocket)
            manager.join(websocket, "room-1", "user")

        delivered = await manager.broadcast("room-1", {"type": "new_message"})

        assert delivered == 1
        assert healthy.sent == [{"type": "new_message"}]
        assert manager.room_of(dead) is None
        assert manager.get_subscriber_count("room-1") == 1
