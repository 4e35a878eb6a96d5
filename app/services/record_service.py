"""
Record Service - submission, per-user views and admin views of portal records.

A lost/found submission is written first and then handed to the matching
engine; a failed match scan never fails the submission.
"""

from pydantic import BaseModel
from typing import List, Optional
import logging

from app.core.settings import settings
from app.models.complaint import Complaint, ComplaintCreate, ComplaintStatus
from app.models.lost_found import LostFoundCreate, LostFoundItem, LostFoundStatus
from app.models.user import Session, UserAccount
from app.models.volunteer import VolunteerRegistration
from app.services.collection_sync import CollectionSync, Subscription, UpdateCallback
from app.services.matching_engine import MatchingEngine, MatchResult
from app.store.base import Predicate, RemoteStore

logger = logging.getLogger(__name__)


class SubmissionResult(BaseModel):
    """Id of the new record, plus possible matches for lost/found reports."""
    id: str
    status: str
    matches: List[MatchResult] = []


class RecordService:
    """Record writes and reads on behalf of the session user."""

    def __init__(self, store: RemoteStore, session: Session, matching: Optional[MatchingEngine] = None):
        self.store = store
        self.session = session
        self.matching = matching

    def submit_lost_found(self, payload: LostFoundCreate) -> SubmissionResult:
        """
        Raises:
            TransientStoreError: if the report itself cannot be written
        """
        item_id = self.store.write(settings.COLLECTION_LOST_FOUND, {
            "title": payload.title,
            "item_type": payload.item_type.value,
            "description": payload.description,
            "category": payload.category,
            "location": payload.location,
            "image_url": payload.image_url or "",
            "owner_id": self.session.user_id,
            "owner_name": self.session.name,
            "status": LostFoundStatus.PENDING.value,
        })
        logger.info(f"Lost/found report {item_id} submitted by {self.session.user_id}")

        matches = []
        if self.matching is not None:
            matches = self.matching.on_submit(item_id, payload.title, self.session.user_id)

        return SubmissionResult(id=item_id, status=LostFoundStatus.PENDING.value, matches=matches)

    def submit_complaint(self, payload: ComplaintCreate) -> SubmissionResult:
        """
        Raises:
            TransientStoreError: if the complaint cannot be written
        """
        complaint_id = self.store.write(settings.COLLECTION_COMPLAINTS, {
            "title": payload.title,
            "category": payload.category,
            "description": payload.description,
            "location": payload.location,
            "urgency": payload.urgency,
            "owner_id": self.session.user_id,
            "owner_name": self.session.name,
            "status": ComplaintStatus.SUBMITTED.value,
        })
        logger.info(f"Complaint {complaint_id} submitted by {self.session.user_id}")
        return SubmissionResult(id=complaint_id, status=ComplaintStatus.SUBMITTED.value)

    def require_admin(self, action: str) -> None:
        """
        Raises:
            PermissionError: if the session is not an admin
        """
        if not self.session.is_admin:
            raise PermissionError(f"User {self.session.user_id} may not {action}")

    @staticmethod
    def record_filters(status: Optional[str] = None, category: Optional[str] = None) -> Predicate:
        """Equality filters for admin record lists; unset values are left out."""
        return {field: value for field, value in (("status", status), ("category", category)) if value}

    def _list(self, collection: str, model, predicate: Optional[Predicate] = None) -> list:
        sync = CollectionSync(self.store, collection, model)
        return list(sync.materialize(self.store.read_once(collection, predicate), predicate))

    def _watch(self, collection: str, model, predicate: Optional[Predicate], on_update: UpdateCallback) -> Subscription:
        return CollectionSync(self.store, collection, model).subscribe(predicate, on_update)

    def _own(self) -> Predicate:
        return {"owner_id": self.session.user_id}

    # -- own records -------------------------------------------------------

    def list_own_lost_found(self) -> List[LostFoundItem]:
        return self._list(settings.COLLECTION_LOST_FOUND, LostFoundItem, self._own())

    def list_own_complaints(self) -> List[Complaint]:
        return self._list(settings.COLLECTION_COMPLAINTS, Complaint, self._own())

    def list_own_registrations(self) -> List[VolunteerRegistration]:
        return self._list(settings.COLLECTION_VOLUNTEERS, VolunteerRegistration, self._own())

    def watch_own_lost_found(self, on_update: UpdateCallback) -> Subscription:
        return self._watch(settings.COLLECTION_LOST_FOUND, LostFoundItem, self._own(), on_update)

    def watch_own_complaints(self, on_update: UpdateCallback) -> Subscription:
        return self._watch(settings.COLLECTION_COMPLAINTS, Complaint, self._own(), on_update)

    def watch_own_registrations(self, on_update: UpdateCallback) -> Subscription:
        return self._watch(settings.COLLECTION_VOLUNTEERS, VolunteerRegistration, self._own(), on_update)

    # -- admin views -------------------------------------------------------

    def list_all_lost_found(self, status: Optional[str] = None, category: Optional[str] = None) -> List[LostFoundItem]:
        self.require_admin("list all lost & found reports")
        return self._list(settings.COLLECTION_LOST_FOUND, LostFoundItem, self.record_filters(status, category))

    def list_all_complaints(self, status: Optional[str] = None, category: Optional[str] = None) -> List[Complaint]:
        self.require_admin("list all complaints")
        return self._list(settings.COLLECTION_COMPLAINTS, Complaint, self.record_filters(status, category))

    def list_all_registrations(self, event_id: Optional[str] = None) -> List[VolunteerRegistration]:
        self.require_admin("list all volunteer registrations")
        predicate = {"event_id": event_id} if event_id else None
        return self._list(settings.COLLECTION_VOLUNTEERS, VolunteerRegistration, predicate)

    def list_users(self) -> List[UserAccount]:
        self.require_admin("list users")
        return self._list(settings.COLLECTION_USERS, UserAccount)

    def watch_all_lost_found(
        self,
        on_update: UpdateCallback,
        status: Optional[str] = None,
        category: Optional[str] = None
    ) -> Subscription:
        self.require_admin("watch all lost & found reports")
        return self._watch(
            settings.COLLECTION_LOST_FOUND, LostFoundItem, self.record_filters(status, category), on_update
        )

    def watch_all_complaints(
        self,
        on_update: UpdateCallback,
        status: Optional[str] = None,
        category: Optional[str] = None
    ) -> Subscription:
        """Live admin complaint table, optionally narrowed by status and category."""
        self.require_admin("watch all complaints")
        return self._watch(settings.COLLECTION_COMPLAINTS, Complaint, self.record_filters(status, category), on_update)

    def watch_all_registrations(self, on_update: UpdateCallback, event_id: Optional[str] = None) -> Subscription:
        self.require_admin("watch all volunteer registrations")
        predicate = {"event_id": event_id} if event_id else None
        return self._watch(settings.COLLECTION_VOLUNTEERS, VolunteerRegistration, predicate, on_update)

    def watch_users(self, on_update: UpdateCallback) -> Subscription:
        self.require_admin("watch users")
        return self._watch(settings.COLLECTION_USERS, UserAccount, None, on_update)
