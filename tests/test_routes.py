"""
HTTP command surface, exercised through TestClient against the in-memory store.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.config import firebase
from app.main import app
from app.store.base import TransientStoreError
from app.store.memory_store import InMemoryRemoteStore

USER = {"X-User-ID": "u1", "X-User-Role": "user", "X-User-Name": "Ayesha"}
OTHER = {"X-User-ID": "u2", "X-User-Role": "user", "X-User-Name": "Bilal"}
ADMIN = {"X-User-ID": "admin-1", "X-User-Role": "admin", "X-User-Name": "Admin"}


@pytest.fixture
def store():
    memory = InMemoryRemoteStore()
    firebase.set_store(memory)
    yield memory
    firebase.set_store(None)


@pytest.fixture
def client(store):
    return TestClient(app)


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json()["status"] == "healthy"

    db = client.get("/health/db").json()
    assert db["connected"] is True
    assert db["users_count"] == 0


def test_identity_header_required(client):
    assert client.get("/lost-found/mine").status_code == 422


class TestLostFound:

    def test_submit_matches_and_lists(self, client):
        first = client.post("/lost-found", json={"title": "Found Brown Wallet Downtown", "item_type": "found"}, headers=OTHER)
        assert first.status_code == 201

        second = client.post("/lost-found", json={"title": "Lost Brown Wallet", "item_type": "lost"}, headers=USER)
        body = second.json()
        assert body["status"] == "Pending"
        assert [m["record_id"] for m in body["matches"]] == [first.json()["id"]]

        mine = client.get("/lost-found/mine", headers=USER).json()
        assert [item["id"] for item in mine] == [body["id"]]

    def test_status_change_is_admin_only(self, client, store):
        item_id = client.post("/lost-found", json={"title": "Keys", "item_type": "lost"}, headers=USER).json()["id"]
        payload = {"status": "Found", "owner_id": "u1"}

        assert client.patch(f"/lost-found/{item_id}/status", json=payload, headers=USER).status_code == 403
        assert client.patch(f"/lost-found/{item_id}/status", json={**payload, "status": "Lost"}, headers=ADMIN).status_code == 400

        response = client.patch(f"/lost-found/{item_id}/status", json=payload, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["notified"] is True
        assert store.read_once("lost_found_items")[0].data["status"] == "Found"

    def test_unknown_record_is_not_found(self, client):
        response = client.patch("/lost-found/nope/status", json={"status": "Found"}, headers=ADMIN)
        assert response.status_code == 404

    def test_store_outage_on_status_change(self, client, store):
        item_id = client.post("/lost-found", json={"title": "Keys", "item_type": "lost"}, headers=USER).json()["id"]

        with patch.object(store, "write", side_effect=TransientStoreError("offline")):
            response = client.patch(f"/lost-found/{item_id}/status", json={"status": "Found"}, headers=ADMIN)
        assert response.status_code == 503

    def test_admin_list_and_filter(self, client, store):
        client.post("/lost-found", json={"title": "Keys", "item_type": "lost", "category": "Keys"}, headers=USER)
        found = client.post("/lost-found", json={"title": "Phone", "item_type": "found"}, headers=OTHER).json()["id"]
        client.patch(f"/lost-found/{found}/status", json={"status": "Found"}, headers=ADMIN)

        assert client.get("/lost-found", headers=USER).status_code == 403
        assert len(client.get("/lost-found", headers=ADMIN).json()) == 2
        assert [i["id"] for i in client.get("/lost-found?status=Found", headers=ADMIN).json()] == [found]
        assert len(client.get("/lost-found?category=Keys", headers=ADMIN).json()) == 1

    def test_admin_stream_requires_admin(self, client):
        assert client.get("/lost-found/stream", headers=USER).status_code == 403

    def test_store_outage_on_submit(self, client, store):
        with patch.object(store, "write", side_effect=TransientStoreError("offline")):
            response = client.post("/lost-found", json={"title": "Keys", "item_type": "lost"}, headers=USER)
        assert response.status_code == 503


class TestComplaints:

    def test_lifecycle_with_notification(self, client, store):
        created = client.post("/complaints", json={"title": "Broken streetlight"}, headers=USER)
        assert created.status_code == 201
        complaint_id = created.json()["id"]
        assert created.json()["status"] == "Submitted"

        response = client.patch(
            f"/complaints/{complaint_id}/status",
            json={"status": "Resolved", "owner_id": "u1"},
            headers=ADMIN,
        )
        assert response.status_code == 200

        mine = client.get("/complaints/mine", headers=USER).json()
        assert mine[0]["status"] == "Resolved"
        messages = [d.data["message"] for d in store.read_once("notifications", {"recipient_id": "u1"})]
        assert messages == ['Your complaint status was updated to "Resolved".']


class TestAdminViews:

    def test_complaint_table_filters(self, client):
        client.post("/complaints", json={"title": "Noise", "category": "Noise"}, headers=USER)
        roads = client.post("/complaints", json={"title": "Potholes", "category": "Roads"}, headers=OTHER).json()["id"]
        client.patch(f"/complaints/{roads}/status", json={"status": "In Progress"}, headers=ADMIN)

        assert client.get("/complaints", headers=USER).status_code == 403
        assert len(client.get("/complaints", headers=ADMIN).json()) == 2
        in_progress = client.get("/complaints", params={"status": "In Progress", "category": "Roads"}, headers=ADMIN).json()
        assert [c["id"] for c in in_progress] == [roads]
        assert client.get("/complaints", params={"status": "Resolved"}, headers=ADMIN).json() == []

    def test_registrations_and_users(self, client, store):
        store.write("users", {"name": "Ayesha", "role": "user"})
        client.post("/volunteers/register", json={"event_id": "health-camp", "name": "Ayesha"}, headers=USER)
        client.post("/volunteers/register", json={"event_id": "tech-workshop", "name": "Bilal"}, headers=OTHER)

        assert client.get("/volunteers", headers=USER).status_code == 403
        assert len(client.get("/volunteers", headers=ADMIN).json()) == 2
        assert len(client.get("/volunteers", params={"event_id": "health-camp"}, headers=ADMIN).json()) == 1

        assert client.get("/users", headers=USER).status_code == 403
        assert [u["name"] for u in client.get("/users", headers=ADMIN).json()] == ["Ayesha"]

    def test_admin_streams_reject_users(self, client):
        for path in ("/complaints/stream", "/volunteers/stream", "/users/stream"):
            assert client.get(path, headers=USER).status_code == 403


class TestVolunteers:

    def test_catalog(self, client):
        ids = [event["id"] for event in client.get("/volunteers/events").json()]
        assert "health-camp" in ids

    def test_duplicate_registration_conflicts(self, client):
        form = {"event_id": "health-camp", "name": "Ayesha"}

        assert client.post("/volunteers/register", json=form, headers=USER).json()["accepted"] is True
        assert client.post("/volunteers/register", json=form, headers=USER).status_code == 409
        assert len(client.get("/volunteers/mine", headers=USER).json()) == 1

    def test_unknown_event_not_found(self, client):
        form = {"event_id": "moon-landing", "name": "Ayesha"}
        assert client.post("/volunteers/register", json=form, headers=USER).status_code == 404
        assert client.get("/volunteers/mine", headers=USER).json() == []


class TestNotifications:

    def test_read_all_and_read_one(self, client, store):
        for text in ("one", "two"):
            store.write("notifications", {"recipient_id": "u1", "message": text, "category": "info", "read": False})
        foreign = store.write("notifications", {"recipient_id": "u2", "message": "x", "category": "info", "read": False})

        assert client.post(f"/notifications/{foreign}/read", headers=USER).status_code == 404
        assert client.post("/notifications/read-all", headers=USER).json()["updated"] == 2
        assert client.post("/notifications/read-all", headers=USER).json()["updated"] == 0
        assert client.post(f"/notifications/{foreign}/read", headers=OTHER).json()["updated"] == 1

    def test_broadcast(self, client, store):
        store.write("users", {"name": "Ayesha", "role": "user"})
        store.write("users", {"name": "Bilal", "role": "user"})

        assert client.post("/notifications/broadcast", json={"message": "Hi"}, headers=USER).status_code == 403

        result = client.post("/notifications/broadcast", json={"message": "Hi"}, headers=ADMIN).json()
        assert result == {"recipients": 2, "delivered": 2, "failed": 0}


class TestDashboard:

    def test_user_counters(self, client):
        client.post("/complaints", json={"title": "Noise"}, headers=USER)
        client.post("/complaints", json={"title": "Other"}, headers=OTHER)

        counters = client.get("/dashboard", headers=USER).json()["counters"]
        assert counters["complaints"] == 1
        assert counters["unread_notifications"] == 0

    def test_admin_counters(self, client):
        client.post("/complaints", json={"title": "Noise"}, headers=USER)
        client.post("/lost-found", json={"title": "Keys", "item_type": "lost"}, headers=USER)

        counters = client.get("/dashboard", headers=ADMIN).json()["counters"]
        assert counters["open_complaints"] == 1
        assert counters["lost_found_pending"] == 1
