"""
Shared fixtures: a fresh in-memory store per test and the usual sessions.
"""

import pytest

from app.models.user import Role, Session
from app.services.notification_hub import NotificationHub
from app.store.memory_store import InMemoryRemoteStore


@pytest.fixture
def store():
    """Empty in-memory store, not persisted."""
    return InMemoryRemoteStore()


@pytest.fixture
def hub(store):
    return NotificationHub(store)


@pytest.fixture
def admin_session():
    return Session(user_id="admin-1", role=Role.ADMIN, name="Admin")


@pytest.fixture
def user_session():
    return Session(user_id="user-1", role=Role.USER, name="Ayesha")


class Recorder:
    """Collects every projection handed to an update callback."""

    def __init__(self):
        self.calls = []

    def __call__(self, projection):
        self.calls.append(projection)

    @property
    def last(self):
        return self.calls[-1] if self.calls else None

    def ids(self, index=-1):
        return [record.id for record in self.calls[index]]


@pytest.fixture
def recorder():
    return Recorder()
