"""
DashboardAggregator tests - mount-time counts, then live counts only.
"""

from unittest.mock import patch

from app.services.collection_sync import SubscriptionRegistry
from app.services.dashboard import (
    CounterSpec,
    DashboardAggregator,
    admin_dashboard_counters,
    user_dashboard_counters,
)
from app.services.notification_hub import NotificationHub
from app.store.base import TransientStoreError


def complaints_counter():
    return [CounterSpec("complaints", "complaints", predicate={"owner_id": "u1"})]


class TestMount:

    def test_live_value_replaces_initial_and_never_reverts(self, store):
        ids = [store.write("complaints", {"owner_id": "u1"}) for _ in range(4)]
        stale = [d for d in store.read_once("complaints") if d.id != ids[-1]]
        published = []
        registry = SubscriptionRegistry()
        aggregator = DashboardAggregator(store, complaints_counter())

        with patch.object(store, "read_once", return_value=stale):
            aggregator.mount(published.append, registry)

        assert [s.counters["complaints"] for s in published] == [3, 4]
        assert aggregator.summary.live == ["complaints"]

        with patch.object(store, "read_once", return_value=stale):
            aggregator.load_initial()
        assert aggregator.summary.counters["complaints"] == 4
        registry.close()

    def test_follows_live_changes(self, store):
        published = []
        registry = SubscriptionRegistry()
        DashboardAggregator(store, complaints_counter()).mount(published.append, registry)

        store.write("complaints", {"owner_id": "u1"})
        store.write("complaints", {"owner_id": "u2"})
        store.write("complaints", {"owner_id": "u1"})

        assert published[-1].counters["complaints"] == 2
        registry.close()

    def test_unmount_releases_every_query(self, store):
        registry = SubscriptionRegistry()
        DashboardAggregator(store, user_dashboard_counters("u1")).mount(lambda s: None, registry)

        assert store.live_query_count == 4
        registry.close()
        assert store.live_query_count == 0

    def test_initial_read_failure_leaves_zero(self, store):
        store.write("complaints", {"owner_id": "u1"})
        aggregator = DashboardAggregator(store, complaints_counter())

        with patch.object(store, "read_once", side_effect=TransientStoreError("offline")):
            summary = aggregator.load_initial()

        assert summary.counters == {"complaints": 0}
        assert summary.live == []

    def test_callback_error_is_contained(self, store):
        registry = SubscriptionRegistry()

        def broken(summary):
            raise RuntimeError("render failed")

        summary = DashboardAggregator(store, complaints_counter()).mount(broken, registry)
        assert summary.counters["complaints"] == 0
        registry.close()


class TestCounterSets:

    def test_user_counters(self, store):
        hub = NotificationHub(store)
        store.write("lost_found_items", {"owner_id": "u1", "title": "Keys"})
        store.write("complaints", {"owner_id": "u1", "title": "Noise"})
        store.write("complaints", {"owner_id": "u2", "title": "Other"})
        store.write("volunteers", {"owner_id": "u1", "event_id": "health-camp"})
        hub.create("u1", "one")
        hub.create("u1", "two")

        registry = SubscriptionRegistry()
        aggregator = DashboardAggregator(store, user_dashboard_counters("u1"))
        aggregator.mount(lambda s: None, registry)

        assert aggregator.summary.counters == {
            "lost_found": 1,
            "complaints": 1,
            "volunteer": 1,
            "unread_notifications": 2,
        }

        hub.mark_all_read("u1")
        assert aggregator.summary.counters["unread_notifications"] == 0
        registry.close()

    def test_admin_counters(self, store):
        store.write("users", {"name": "A", "role": "user"})
        store.write("users", {"name": "B", "role": "admin"})
        store.write("lost_found_items", {"owner_id": "u1", "status": "Pending"})
        store.write("lost_found_items", {"owner_id": "u1", "status": "Found"})
        store.write("complaints", {"owner_id": "u1", "status": "Submitted"})
        store.write("complaints", {"owner_id": "u1", "status": "In Progress"})
        resolved = store.write("complaints", {"owner_id": "u1", "status": "Submitted"})

        registry = SubscriptionRegistry()
        aggregator = DashboardAggregator(store, admin_dashboard_counters())
        aggregator.mount(lambda s: None, registry)
        store.write("complaints", {"status": "Resolved"}, record_id=resolved)

        assert aggregator.summary.counters == {
            "users": 2,
            "lost_found_pending": 1,
            "open_complaints": 2,
            "volunteers": 0,
        }
        registry.close()
