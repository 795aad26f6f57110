"""
WebSocket connection manager for collaboration chat.

Sockets join one room per collaboration after authenticating. Messages
stored through either the HTTP routes or the socket itself are broadcast
to the room; clients without a socket poll the message history instead.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from shared.metrics import setup_metrics

logger = structlog.get_logger(__name__)


class ConnectionManager:
    """Tracks chat sockets and the collaboration room each one joined."""

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = {}
        self.connection_info: Dict[WebSocket, Dict[str, Any]] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        self.connection_info[websocket] = {
            "connected_at": datetime.now(timezone.utc),
            "collaboration_id": None,
            "user_id": None,
        }
        _, planning = setup_metrics()
        planning.websocket_connections.inc()
        logger.info("websocket_connected", total=len(self.connection_info))

    def disconnect(self, websocket: WebSocket) -> None:
        """Forget a socket and drop it from its room."""
        info = self.connection_info.pop(websocket, None)
        if info is None:
            return

        room_id = info.get("collaboration_id")
        if room_id and room_id in self.rooms:
            self.rooms[room_id].discard(websocket)
            if not self.rooms[room_id]:
                del self.rooms[room_id]

        _, planning = setup_metrics()
        planning.websocket_connections.dec()
        logger.info(
            "websocket_disconnected",
            collaboration_id=room_id,
            total=len(self.connection_info),
        )

    def join(self, websocket: WebSocket, collaboration_id: str, user_id: str) -> None:
        """Subscribe an authenticated socket to a collaboration room."""
        info = self.connection_info.setdefault(websocket, {})
        previous = info.get("collaboration_id")
        if previous and previous in self.rooms:
            self.rooms[previous].discard(websocket)

        info["collaboration_id"] = collaboration_id
        info["user_id"] = user_id
        self.rooms.setdefault(collaboration_id, set()).add(websocket)
        logger.debug("websocket_joined_room", collaboration_id=collaboration_id, user_id=user_id)

    def room_of(self, websocket: WebSocket) -> Optional[str]:
        return self.connection_info.get(websocket, {}).get("collaboration_id")

    def user_of(self, websocket: WebSocket) -> Optional[str]:
        return self.connection_info.get(websocket, {}).get("user_id")

    async def broadcast(self, collaboration_id: str, message: Dict[str, Any]) -> int:
        """
        Send a message to every socket in a collaboration room.

        Sockets that fail to receive are disconnected.

        Returns:
            Number of sockets the message reached
        """
        subscribers = list(self.rooms.get(collaboration_id, ()))
        delivered = 0
        disconnected = []

        for websocket in subscribers:
            try:
                await websocket.send_json(message)
                delivered += 1
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.warning("websocket_send_failed", collaboration_id=collaboration_id, error=repr(e))
                disconnected.append(websocket)

        for websocket in disconnected:
            self.disconnect(websocket)

        return delivered

    def get_subscriber_count(self, collaboration_id: str) -> int:
        return len(self.rooms.get(collaboration_id, ()))

    def get_total_connections(self) -> int:
        return len(self.connection_info)


# Singleton connection manager
manager = ConnectionManager()
