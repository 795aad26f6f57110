"""Account and socket helpers shared by the API tests."""

from typing import Any, Dict, Optional

from fastapi.testclient import TestClient
from starlette.websockets import WebSocket

PASSWORD = "secret123"

PLANNER_PROFILE = {
    "businessName": "Bright Day Events",
    "services": ["Weddings", "Corporate"],
    "experience": "7 years",
    "description": "Full service planning",
    "pricing": "From $2,000",
}


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(
    test_client: TestClient,
    email: str,
    name: str = "Test User",
    account_type: str = "client",
    planner_profile: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Register an account and return the response body (includes ``token``)."""
    payload: Dict[str, Any] = {
        "name": name,
        "email": email,
        "password": PASSWORD,
        "accountType": account_type,
    }
    if planner_profile is not None:
        payload["plannerProfile"] = planner_profile

    response = test_client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    # Tests authenticate with explicit headers; drop the session cookie.
    test_client.cookies.clear()
    return response.json()


def create_collaboration(
    test_client: TestClient,
    client_account: Dict[str, Any],
    planner_account: Dict[str, Any],
    event_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Open a collaboration: the client invites the planner, who accepts.

    Returns:
        The accept response body (``collaborationId``, ``eventId``)
    """
    payload: Dict[str, Any] = {"receiverId": planner_account["_id"], "message": "Help with my party"}
    if event_id is not None:
        payload["eventId"] = event_id

    sent = test_client.post(
        "/api/match-requests", json=payload, headers=auth_headers(client_account["token"])
    )
    assert sent.status_code == 201, sent.text

    accepted = test_client.patch(
        f"/api/match-requests/{sent.json()['_id']}",
        json={"status": "accepted"},
        headers=auth_headers(planner_account["token"]),
    )
    assert accepted.status_code == 200, accepted.text
    return accepted.json()


def dead_peer_websocket() -> WebSocket:
    """Accepted Starlette WebSocket whose transport fails on every send."""

    async def receive() -> Dict[str, Any]:
        return {"type": "websocket.connect"}

    async def send(message: Dict[str, Any]) -> None:
        if message["type"] == "websocket.send":
            raise OSError("Connection reset by peer")

    return WebSocket({"type": "websocket", "path": "/ws", "headers": []}, receive, send)
