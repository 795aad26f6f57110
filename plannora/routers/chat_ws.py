"""
WebSocket chat endpoint.

Protocol (JSON text frames):

Client sends:
- {"type": "auth", "token": "...", "collaborationId": "..."}
- {"type": "message", "message": "..."}
- {"type": "ping"}

Server sends:
- {"type": "auth_success", "collaborationId": "..."}
- {"type": "auth_error", "message": "..."} followed by close code 1008
- {"type": "new_message", "message": {...}}
- {"type": "pong"}
- {"type": "error", "message": "..."}
"""

import json
from typing import Any, Dict, Optional

import structlog
from bson import ObjectId
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState
from pymongo.database import Database

from plannora.database import DatabaseUnavailableError
from plannora.dependencies import get_db
from plannora.models.auth import CurrentUser
from plannora.repositories.user_repo import UserRepository
from plannora.services.auth_service import AuthenticationError, AuthService
from plannora.services.chat_manager import manager
from plannora.services.collaboration_service import CollaborationService, ResourceNotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["WebSocket"])


async def _reject(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"type": "auth_error", "message": message})
    await websocket.close(code=status.WS_1008_POLICY_VIOLATION)


async def _close_on_error(websocket: WebSocket) -> None:
    manager.disconnect(websocket)
    if websocket.application_state == WebSocketState.CONNECTED:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)


async def _authenticate(
    websocket: WebSocket,
    payload: Dict[str, Any],
    auth_service: AuthService,
    service: CollaborationService,
) -> Optional[CurrentUser]:
    """
    Verify the token and the caller's access to the collaboration.

    Returns:
        The user, or None after the socket was rejected and closed
    """
    token = payload.get("token")
    collaboration_id = payload.get("collaborationId")

    if not token or not collaboration_id:
        await _reject(websocket, "Token and collaborationId are required")
        return None

    if not ObjectId.is_valid(collaboration_id):
        await _reject(websocket, "Invalid collaboration ID format")
        return None

    try:
        user = await auth_service.get_current_user(token)
        await service.get_collaboration(ObjectId(collaboration_id), user)
    except (AuthenticationError, ResourceNotFoundError) as e:
        logger.warning("websocket_auth_rejected", reason=e.detail)
        await _reject(websocket, e.detail)
        return None

    manager.join(websocket, collaboration_id, user.id)
    await websocket.send_json({"type": "auth_success", "collaborationId": collaboration_id})
    logger.info("websocket_authenticated", user_id=user.id, collaboration_id=collaboration_id)
    return user


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket, db: Database = Depends(get_db)):
    """
    Real-time chat for one collaboration per socket.

    The first frame must be an ``auth`` message. Chat messages sent here
    are stored exactly like HTTP posts and broadcast to the room.
    """
    auth_service = AuthService(UserRepository(db))
    service = CollaborationService(db)
    user: Optional[CurrentUser] = None

    await manager.connect(websocket)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                payload = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue

            if not isinstance(payload, dict):
                await websocket.send_json({"type": "error", "message": "Invalid message format"})
                continue

            message_type = payload.get("type")

            if message_type == "ping":
                await websocket.send_json({"type": "pong"})

            elif message_type == "auth":
                user = await _authenticate(websocket, payload, auth_service, service)
                if user is None:
                    manager.disconnect(websocket)
                    return

            elif user is None:
                await websocket.send_json({"type": "error", "message": "Not authenticated"})

            elif message_type == "message":
                room = manager.room_of(websocket)
                try:
                    await service.post_message(
                        ObjectId(room), user, payload.get("message") or "", channel="websocket"
                    )
                except (ValueError, ResourceNotFoundError) as e:
                    await websocket.send_json({"type": "error", "message": str(e)})

            else:
                await websocket.send_json(
                    {"type": "error", "message": f"Unknown message type: {message_type}"}
                )

    except WebSocketDisconnect:
        manager.disconnect(websocket)
        logger.debug("websocket_client_disconnected")

    except DatabaseUnavailableError as e:
        logger.error("websocket_database_unavailable", error=str(e))
        await _close_on_error(websocket)

    except Exception as e:
        logger.error("websocket_error", error=str(e), exc_info=True)
        await _close_on_error(websocket)
