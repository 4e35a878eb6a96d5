"""
Workflow Controller - admin status changes on complaints and lost/found reports.

DESIGN PRINCIPLES:
- Only admins change status
- Any named status of the record kind is assignable from any other
  (no ordering is enforced; unknown labels are rejected)
- The owner notified is the one stored on the record, not the caller's claim
- Status update first, owner notification second; they are not one
  transaction, so a lost notification never undoes a status change
"""

from enum import Enum
from pydantic import BaseModel
from typing import Dict, List, Optional, Type
import logging

from app.core.settings import settings
from app.models.complaint import ComplaintStatus
from app.models.lost_found import LostFoundStatus
from app.models.notification import NotificationCategory
from app.models.user import Session
from app.services.notification_hub import NotificationHub
from app.store.base import RemoteStore, TransientStoreError

logger = logging.getLogger(__name__)


class RecordKind(str, Enum):
    """Record kinds that carry an admin-owned status."""
    LOST_FOUND = "lost_found"
    COMPLAINT = "complaint"


class TransitionResult(BaseModel):
    """Outcome of a status change."""
    record_id: str
    kind: RecordKind
    status: str
    updated: bool
    missing: bool = False
    notified: bool = False
    notified_owner: Optional[str] = None
    error: Optional[str] = None


class WorkflowController:
    """
    Status assignment for admin sessions.

    Statuses per kind:
    LOST_FOUND: Pending, Found
    COMPLAINT:  Submitted, In Progress, Resolved
    """

    STATUSES: Dict[RecordKind, Type[Enum]] = {
        RecordKind.LOST_FOUND: LostFoundStatus,
        RecordKind.COMPLAINT: ComplaintStatus,
    }

    NOTIFICATION_CATEGORIES: Dict[RecordKind, NotificationCategory] = {
        RecordKind.LOST_FOUND: NotificationCategory.LOSTFOUND,
        RecordKind.COMPLAINT: NotificationCategory.COMPLAINT,
    }

    def __init__(self, store: RemoteStore, hub: NotificationHub, session: Session):
        self.store = store
        self.hub = hub
        self.session = session

    @classmethod
    def is_valid_status(cls, kind: RecordKind, status: str) -> bool:
        try:
            cls.STATUSES[RecordKind(kind)](status)
        except ValueError:
            return False
        return True

    @classmethod
    def get_allowed_transitions(cls, kind: RecordKind, current_status: str) -> List[str]:
        """
        Statuses an admin may assign next.

        Every named status of the kind, whatever the current one is.
        """
        return [status.value for status in cls.STATUSES[RecordKind(kind)]]

    @staticmethod
    def collection_for(kind: RecordKind) -> str:
        if RecordKind(kind) == RecordKind.COMPLAINT:
            return settings.COLLECTION_COMPLAINTS
        return settings.COLLECTION_LOST_FOUND

    @staticmethod
    def status_message(kind: RecordKind, record_id: str, status: str) -> str:
        if RecordKind(kind) == RecordKind.COMPLAINT:
            return f'Your complaint status was updated to "{status}".'
        return f'#{record_id[:8]} status updated to "{status}".'

    def transition(
        self,
        kind: RecordKind,
        record_id: str,
        new_status: str,
        owner_id: Optional[str] = None
    ) -> TransitionResult:
        """
        Set a record's status and tell its owner.

        The owner comes from the stored record. `owner_id` is only used for
        records that carry none; a mismatch with the stored owner is logged.

        Raises:
            PermissionError: if the session is not an admin
            ValueError: if `new_status` is not a status of `kind`
        """
        kind = RecordKind(kind)

        if not self.session.is_admin:
            raise PermissionError(f"User {self.session.user_id} may not change {kind.value} status")

        if not self.is_valid_status(kind, new_status):
            raise ValueError(
                f"Invalid {kind.value} status: {new_status}. "
                f"Allowed: {self.get_allowed_transitions(kind, new_status)}"
            )

        collection = self.collection_for(kind)
        try:
            record = self.store.read_one(collection, record_id)
            if record is None:
                logger.warning(f"Status update of missing {kind.value} {record_id} ignored")
                return TransitionResult(
                    record_id=record_id,
                    kind=kind,
                    status=new_status,
                    updated=False,
                    missing=True,
                    error=f"{kind.value} {record_id} not found",
                )

            self.store.write(
                collection,
                {"status": new_status, "status_changed_by": self.session.user_id},
                record_id=record_id,
            )
        except TransientStoreError as e:
            logger.warning(f"Status update of {kind.value} {record_id} to '{new_status}' failed: {e}")
            return TransitionResult(record_id=record_id, kind=kind, status=new_status, updated=False, error=str(e))

        logger.info(f"{kind.value} {record_id} set to '{new_status}' by {self.session.user_id}")

        stored_owner = record.data.get("owner_id")
        if owner_id and stored_owner and owner_id != stored_owner:
            logger.warning(
                f"Owner {owner_id} given for {kind.value} {record_id} does not match stored owner {stored_owner}"
            )
        recipient_id = stored_owner or owner_id
        if not recipient_id:
            logger.warning(f"{kind.value} {record_id} has no owner to notify")
            return TransitionResult(record_id=record_id, kind=kind, status=new_status, updated=True)

        notification_id = self.hub.create(
            recipient_id,
            self.status_message(kind, record_id, new_status),
            self.NOTIFICATION_CATEGORIES[kind],
        )
        if notification_id is None:
            logger.warning(f"Status of {kind.value} {record_id} changed but owner {recipient_id} was not notified")

        return TransitionResult(
            record_id=record_id,
            kind=kind,
            status=new_status,
            updated=True,
            notified=notification_id is not None,
            notified_owner=recipient_id,
        )

    def update_complaint_status(self, complaint_id: str, new_status: str, owner_id: Optional[str] = None) -> TransitionResult:
        return self.transition(RecordKind.COMPLAINT, complaint_id, new_status, owner_id)

    def update_lost_found_status(self, item_id: str, new_status: str, owner_id: Optional[str] = None) -> TransitionResult:
        return self.transition(RecordKind.LOST_FOUND, item_id, new_status, owner_id)
