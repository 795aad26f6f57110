"""
Contract tests for the event planning and provider catalog API.

Tests cover:
- Current event retrieval and creation
- Event CRUD with owner/collaborator access rules
- Wizard step and category upserts
- Provider selection, budget impact and alternatives
- Public provider catalog endpoints
"""

from bson import ObjectId

from tests.helpers import auth_headers, register


def _new_event(client, token, **fields):
    response = client.post("/api/events/new", json=fields, headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# CURRENT EVENT
# ============================================================================


class TestCurrentEvent:
    """Test /api/events/current"""

    def test_requires_authentication(self, client):
        assert client.get("/api/events/current").status_code == 401
        assert client.get("/api/events").status_code == 401

    def test_created_on_first_access(self, client, client_account):
        headers = auth_headers(client_account["token"])

        first = client.get("/api/events/current", headers=headers)
        second = client.get("/api/events/current", headers=headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["_id"] == second.json()["_id"]
        assert first.json()["user"] == client_account["_id"]
        assert first.json()["step"] == 1

    def test_delete_current(self, client, client_account):
        headers = auth_headers(client_account["token"])
        client.get("/api/events/current", headers=headers)

        deleted = client.delete("/api/events/current", headers=headers)
        missing = client.delete("/api/events/current", headers=headers)

        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Event deleted successfully"}
        assert missing.status_code == 404
        assert missing.json() == {"detail": "No current event found"}


# ============================================================================
# EVENT CRUD
# ============================================================================


class TestEventCrud:
    """Test create, read, save and delete"""

    def test_create_with_defaults_and_extra_fields(self, client, client_account):
        event = _new_event(
            client, client_account["token"], name="Birthday", budget=2500, theme="Garden"
        )

        assert event["name"] == "Birthday"
        assert event["budget"] == 2500
        assert event["eventType"] == "Party"
        assert event["selectedProviders"] == []
        assert event["theme"] == "Garden"
        assert event["collaborators"] == []

    def test_list_own_events(self, client, client_account):
        _new_event(client, client_account["token"], name="One")
        _new_event(client, client_account["token"], name="Two")

        response = client.get("/api/events", headers=auth_headers(client_account["token"]))

        assert response.status_code == 200
        assert sorted(event["name"] for event in response.json()) == ["One", "Two"]

    def test_get_event_access(self, client, client_account):
        event = _new_event(client, client_account["token"], name="Private")
        stranger = register(client, "stranger@example.com")

        own = client.get(f"/api/events/{event['_id']}", headers=auth_headers(client_account["token"]))
        other = client.get(f"/api/events/{event['_id']}", headers=auth_headers(stranger["token"]))

        assert own.status_code == 200
        assert other.status_code == 404

    def test_invalid_id(self, client, client_account):
        response = client.get("/api/events/not-an-id", headers=auth_headers(client_account["token"]))

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid event ID format"}

    def test_put_creates_then_updates(self, client, client_account):
        headers = auth_headers(client_account["token"])
        event_id = str(ObjectId())

        created = client.put(f"/api/events/{event_id}", json={"name": "Offline"}, headers=headers)
        updated = client.put(
            f"/api/events/{event_id}", json={"guestCount": 80, "location": "Lisbon"}, headers=headers
        )

        assert created.status_code == 201
        assert created.json()["_id"] == event_id
        assert updated.status_code == 200
        assert updated.json()["name"] == "Offline"
        assert updated.json()["guestCount"] == 80

    def test_put_ignores_immutable_fields(self, client, client_account):
        headers = auth_headers(client_account["token"])
        event = _new_event(client, client_account["token"], name="Mine")
        intruder = str(ObjectId())

        response = client.put(
            f"/api/events/{event['_id']}",
            json={"user": intruder, "collaborators": [intruder], "name": "Renamed"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["user"] == client_account["_id"]
        assert response.json()["collaborators"] == []
        assert response.json()["name"] == "Renamed"

    def test_put_on_someone_elses_event(self, client, client_account):
        event = _new_event(client, client_account["token"], name="Mine")
        stranger = register(client, "stranger@example.com")

        response = client.put(
            f"/api/events/{event['_id']}", json={"name": "Theirs"}, headers=auth_headers(stranger["token"])
        )

        assert response.status_code == 404

    def test_put_validation(self, client, client_account):
        response = client.put(
            f"/api/events/{ObjectId()}",
            json={"guestCount": -5},
            headers=auth_headers(client_account["token"]),
        )
        assert response.status_code == 422

    def test_delete_only_by_owner(self, client, client_account):
        event = _new_event(client, client_account["token"], name="Mine")
        stranger = register(client, "stranger@example.com")

        denied = client.delete(f"/api/events/{event['_id']}", headers=auth_headers(stranger["token"]))
        allowed = client.delete(
            f"/api/events/{event['_id']}", headers=auth_headers(client_account["token"])
        )

        assert denied.status_code == 404
        assert denied.json() == {"detail": "Event not found or you do not have permission to delete it"}
        assert allowed.status_code == 200


# ============================================================================
# WIZARD UPSERTS
# ============================================================================


class TestWizardUpserts:
    """Test PATCH /api/events/step and /api/events/category"""

    def test_step_upsert(self, client, client_account):
        headers = auth_headers(client_account["token"])
        event_id = str(ObjectId())

        first = client.patch("/api/events/step", json={"eventId": event_id, "step": 2}, headers=headers)
        second = client.patch("/api/events/step", json={"eventId": event_id, "step": 3}, headers=headers)

        assert first.json() == {"message": "Step updated successfully", "upserted": True}
        assert second.json() == {"message": "Step updated successfully", "upserted": False}
        event = client.get(f"/api/events/{event_id}", headers=headers).json()
        assert event["step"] == 3

    def test_category_upsert(self, client, client_account):
        headers = auth_headers(client_account["token"])
        event = _new_event(client, client_account["token"])

        response = client.patch(
            "/api/events/category",
            json={"eventId": event["_id"], "activeCategory": "Catering"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["upserted"] is False
        assert client.get(f"/api/events/{event['_id']}", headers=headers).json()["activeCategory"] == "Catering"

    def test_step_must_be_positive(self, client, client_account):
        response = client.patch(
            "/api/events/step",
            json={"eventId": str(ObjectId()), "step": 0},
            headers=auth_headers(client_account["token"]),
        )
        assert response.status_code == 422


# ============================================================================
# PROVIDER SELECTION AND BUDGET
# ============================================================================


class TestProviderSelection:
    """Test provider selection on an event"""

    def _select(self, client, token, event_id, provider_id, offer_id=None):
        payload = {"providerId": provider_id}
        if offer_id:
            payload["offerId"] = offer_id
        return client.post(
            f"/api/events/{event_id}/providers", json=payload, headers=auth_headers(token)
        )

    def test_add_change_and_remove(self, client, client_account):
        token = client_account["token"]
        event = _new_event(client, token, budget=10000, guestCount=100)

        added = self._select(client, token, event["_id"], "venue-1")
        changed = self._select(client, token, event["_id"], "venue-1", "venue-1-premium")
        removed = self._select(client, token, event["_id"], "venue-1", "venue-1-premium")

        assert added.status_code == 200
        assert added.json()["impact"]["action"] == "add"
        assert added.json()["event"]["selectedProviders"][0]["offerId"] == "venue-1-basic"
        assert changed.json()["impact"]["action"] == "change"
        assert changed.json()["event"]["selectedProviders"][0]["price"] == 7500
        assert removed.json()["impact"]["action"] == "remove"
        assert removed.json()["event"]["selectedProviders"] == []

    def test_over_budget_returns_alternatives(self, client, client_account):
        token = client_account["token"]
        event = _new_event(client, token, budget=4000)

        response = self._select(client, token, event["_id"], "venue-1")

        body = response.json()
        assert body["impact"]["isPositive"] is False
        assert body["alternatives"]
        assert all(p["category"] == "Venue" for p in body["alternatives"])

    def test_unknown_provider_and_offer(self, client, client_account):
        token = client_account["token"]
        event = _new_event(client, token)

        unknown_provider = self._select(client, token, event["_id"], "venue-99")
        unknown_offer = self._select(client, token, event["_id"], "venue-1", "venue-1-gold")

        assert unknown_provider.status_code == 404
        assert unknown_provider.json() == {"detail": "Provider not found"}
        assert unknown_offer.status_code == 404
        assert unknown_offer.json() == {"detail": "Offer not found"}

    def test_remove_endpoint(self, client, client_account):
        token = client_account["token"]
        event = _new_event(client, token, budget=10000)
        self._select(client, token, event["_id"], "music-3")

        removed = client.delete(
            f"/api/events/{event['_id']}/providers/music-3", headers=auth_headers(token)
        )
        missing = client.delete(
            f"/api/events/{event['_id']}/providers/music-3", headers=auth_headers(token)
        )

        assert removed.status_code == 200
        assert removed.json()["impact"]["action"] == "remove"
        assert missing.status_code == 404
        assert missing.json() == {"detail": "Provider is not selected for this event"}

    def test_budget_summary(self, client, client_account):
        token = client_account["token"]
        event = _new_event(client, token, budget=10000, guestCount=100)
        self._select(client, token, event["_id"], "venue-1")

        response = client.get(f"/api/events/{event['_id']}/budget", headers=auth_headers(token))

        assert response.status_code == 200
        body = response.json()
        assert body["currentTotal"] == 5000
        assert body["budgetRemaining"] == 5000
        assert body["percentUsed"] == 50
        assert body["isOverBudget"] is False
        assert {s["category"] for s in body["suggestions"]} == {"Catering", "Photography"}

    def test_alternatives_endpoint(self, client, client_account):
        token = client_account["token"]
        event = _new_event(client, token, budget=3000)

        response = client.get(
            f"/api/events/{event['_id']}/alternatives",
            params={"providerId": "venue-1"},
            headers=auth_headers(token),
        )

        assert response.status_code == 200
        assert "venue-3" in [p["id"] for p in response.json()]


# ============================================================================
# PROVIDER CATALOG
# ============================================================================


class TestProviderCatalog:
    """Test the public provider catalog"""

    def test_list_without_authentication(self, client):
        response = client.get("/api/providers")

        assert response.status_code == 200
        assert len(response.json()) > 20
        assert {"id", "name", "category", "price", "rating"} <= set(response.json()[0])

    def test_filter_by_category(self, client):
        response = client.get("/api/providers", params={"category": "Music"})

        assert response.status_code == 200
        assert {p["id"] for p in response.json()} == {"music-1", "music-2", "music-3"}

    def test_unknown_category(self, client):
        assert client.get("/api/providers", params={"category": "Dragons"}).status_code == 422

    def test_categories(self, client):
        response = client.get("/api/providers/categories")

        venue = next(c for c in response.json() if c["category"] == "Venue")
        assert venue == {"category": "Venue", "count": 6, "minPrice": 3500}

    def test_get_provider(self, client):
        response = client.get("/api/providers/venue-1")

        assert response.status_code == 200
        assert [offer["id"] for offer in response.json()["offers"]] == [
            "venue-1-basic",
            "venue-1-premium",
            "venue-1-complete",
        ]

    def test_unknown_provider(self, client):
        response = client.get("/api/providers/venue-99")

        assert response.status_code == 404
        assert response.json() == {"detail": "Provider not found"}
