"""
WorkflowController tests - admin status changes and owner notification.
"""

from unittest.mock import MagicMock, patch

import pytest

from app.models.user import Session
from app.services.workflow_controller import RecordKind, WorkflowController
from app.store.base import TransientStoreError


def notifications_for(store, recipient_id):
    return [d.data for d in store.read_once("notifications", {"recipient_id": recipient_id})]


@pytest.fixture
def complaint_id(store):
    return store.write("complaints", {"title": "Broken streetlight", "owner_id": "owner-1", "status": "Submitted"})


@pytest.fixture
def item_id(store):
    return store.write("lost_found_items", {"title": "Red umbrella", "owner_id": "owner-1", "status": "Pending"})


class TestTransition:

    def test_submitted_straight_to_resolved(self, store, hub, admin_session, complaint_id):
        controller = WorkflowController(store, hub, admin_session)

        result = controller.update_complaint_status(complaint_id, "Resolved", "owner-1")

        assert result.updated and result.notified
        assert store.read_once("complaints")[0].data["status"] == "Resolved"
        sent = notifications_for(store, "owner-1")
        assert len(sent) == 1
        assert "Resolved" in sent[0]["message"]
        assert sent[0]["category"] == "complaint"

    def test_lost_found_message_names_the_record(self, store, hub, admin_session, item_id):
        WorkflowController(store, hub, admin_session).update_lost_found_status(item_id, "Found", "owner-1")

        sent = notifications_for(store, "owner-1")
        assert sent[0]["message"] == f'#{item_id[:8]} status updated to "Found".'
        assert sent[0]["category"] == "lostfound"

    def test_records_who_changed_it(self, store, hub, admin_session, complaint_id):
        WorkflowController(store, hub, admin_session).update_complaint_status(complaint_id, "In Progress", "owner-1")

        assert store.read_once("complaints")[0].data["status_changed_by"] == admin_session.user_id

    def test_backwards_move_is_allowed(self, store, hub, admin_session, complaint_id):
        controller = WorkflowController(store, hub, admin_session)
        controller.update_complaint_status(complaint_id, "Resolved", "owner-1")

        assert controller.update_complaint_status(complaint_id, "Submitted", "owner-1").updated

    def test_non_admin_rejected(self, store, hub, user_session, complaint_id):
        controller = WorkflowController(store, hub, user_session)

        with pytest.raises(PermissionError):
            controller.update_complaint_status(complaint_id, "Resolved", "owner-1")

        assert store.read_once("complaints")[0].data["status"] == "Submitted"
        assert store.read_once("notifications") == []

    def test_unknown_status_rejected(self, store, hub, admin_session, item_id):
        controller = WorkflowController(store, hub, admin_session)

        with pytest.raises(ValueError):
            controller.update_lost_found_status(item_id, "Resolved", "owner-1")

        assert store.read_once("lost_found_items")[0].data["status"] == "Pending"

    def test_missing_record_sends_nothing(self, store, hub, admin_session):
        result = WorkflowController(store, hub, admin_session).update_complaint_status("missing", "Resolved", "owner-1")

        assert not result.updated
        assert result.missing
        assert store.read_once("notifications") == []

    def test_failed_update_sends_nothing(self, store, hub, admin_session, complaint_id):
        with patch.object(store, "write", side_effect=TransientStoreError("offline")):
            result = WorkflowController(store, hub, admin_session).update_complaint_status(complaint_id, "Resolved")

        assert not result.updated and not result.missing
        assert result.error
        assert store.read_once("complaints")[0].data["status"] == "Submitted"
        assert store.read_once("notifications") == []

    def test_stored_owner_is_notified_not_the_claimed_one(self, store, hub, admin_session, complaint_id):
        result = WorkflowController(store, hub, admin_session).update_complaint_status(
            complaint_id, "Resolved", "someone-else"
        )

        assert result.notified_owner == "owner-1"
        assert len(notifications_for(store, "owner-1")) == 1
        assert notifications_for(store, "someone-else") == []

    def test_owner_fallback_for_records_without_one(self, store, hub, admin_session):
        orphan = store.write("complaints", {"title": "Old import", "status": "Submitted"})

        result = WorkflowController(store, hub, admin_session).update_complaint_status(orphan, "Resolved", "owner-9")

        assert result.notified_owner == "owner-9"
        assert len(notifications_for(store, "owner-9")) == 1

    def test_no_owner_at_all_still_updates(self, store, hub, admin_session):
        orphan = store.write("complaints", {"title": "Old import", "status": "Submitted"})

        result = WorkflowController(store, hub, admin_session).update_complaint_status(orphan, "Resolved")

        assert result.updated and not result.notified
        assert store.read_once("notifications") == []

    def test_failed_notification_keeps_the_status(self, store, admin_session, complaint_id):
        hub = MagicMock()
        hub.create.return_value = None

        result = WorkflowController(store, hub, admin_session).update_complaint_status(complaint_id, "Resolved", "owner-1")

        assert result.updated and not result.notified
        assert store.read_once("complaints")[0].data["status"] == "Resolved"


class TestStatusCatalog:

    def test_allowed_transitions_are_every_status(self):
        assert WorkflowController.get_allowed_transitions(RecordKind.COMPLAINT, "Resolved") == [
            "Submitted", "In Progress", "Resolved"
        ]
        assert WorkflowController.get_allowed_transitions(RecordKind.LOST_FOUND, "Pending") == ["Pending", "Found"]

    def test_is_valid_status(self):
        assert WorkflowController.is_valid_status(RecordKind.COMPLAINT, "In Progress")
        assert not WorkflowController.is_valid_status(RecordKind.COMPLAINT, "Found")
        assert not WorkflowController.is_valid_status("lost_found", "resolved")

    def test_kind_accepts_plain_strings(self, store, hub, complaint_id):
        controller = WorkflowController(store, hub, Session(user_id="a", role="admin"))
        assert controller.transition("complaint", complaint_id, "Resolved", "owner-1").kind == RecordKind.COMPLAINT
