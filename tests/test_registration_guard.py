"""
RegistrationGuard tests - one registration per (user, event).
"""

from unittest.mock import patch

import pytest

from app.models.volunteer import VolunteerCreate
from app.services.registration_guard import RegistrationGuard
from app.store.base import TransientStoreError


@pytest.fixture
def form():
    return VolunteerCreate(event_id="health-camp", name="Ayesha", email="ayesha@example.com")


class TestRegister:

    def test_first_registration_accepted(self, store, form):
        result = RegistrationGuard(store).register("u1", "health-camp", form, user_name="Ayesha")

        assert result.accepted
        data = store.read_once("volunteers")[0].data
        assert data["owner_id"] == "u1"
        assert data["event_title"] == "Health Camp"
        assert data["status"] == "Registered"

    def test_sequential_duplicate_rejected(self, store, form):
        guard = RegistrationGuard(store)
        guard.register("u1", "health-camp", form)

        second = guard.register("u1", "health-camp", form)

        assert not second.accepted
        assert second.reason == "already_registered"
        assert len(store.read_once("volunteers")) == 1

    def test_other_event_or_user_accepted(self, store, form):
        guard = RegistrationGuard(store)
        guard.register("u1", "health-camp", form)

        assert guard.register("u1", "tech-workshop", form).accepted
        assert guard.register("u2", "health-camp", form).accepted
        assert len(store.read_once("volunteers")) == 3

    def test_store_failure(self, store, form):
        with patch.object(store, "read_once", side_effect=TransientStoreError("offline")):
            result = RegistrationGuard(store).register("u1", "health-camp", form)

        assert not result.accepted
        assert result.reason == "store_unavailable"
        assert store.read_once("volunteers") == []

    def test_concurrent_attempts_can_both_pass(self, store, form):
        """Two checks that both run before either write see no registration."""
        guard = RegistrationGuard(store)
        with patch.object(store, "read_once", return_value=[]):
            first = guard.register("u1", "health-camp", form)
            second = guard.register("u1", "health-camp", form)

        assert first.accepted and second.accepted
        assert len(store.read_once("volunteers")) == 2
        assert guard.is_registered("u1", "health-camp")

    def test_unknown_event_rejected(self, store):
        form = VolunteerCreate(event_id="moon-landing", name="Ayesha")

        with patch.object(store, "read_once") as read_once:
            result = RegistrationGuard(store).register("u1", "moon-landing", form)

        assert not result.accepted
        assert result.reason == "unknown_event"
        read_once.assert_not_called()
        assert store.read_once("volunteers") == []
