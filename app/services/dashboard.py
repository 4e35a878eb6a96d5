"""
Dashboard Aggregator - summary counters for user and admin dashboards.

DESIGN PRINCIPLES:
- At mount, one point-in-time count per counter so numbers show immediately
- After that, counters follow live queries only; no second point-in-time read
- Once a counter has a live value it never goes back to the mount-time count
"""

from dataclasses import dataclass
from pydantic import BaseModel
from typing import Callable, Dict, List, Optional, Type
import logging

from app.core.settings import settings
from app.models.base import StoredModel
from app.models.complaint import Complaint, ComplaintStatus
from app.models.lost_found import LostFoundItem, LostFoundStatus
from app.models.notification import Notification
from app.models.user import UserAccount
from app.models.volunteer import VolunteerRegistration
from app.services.collection_sync import CollectionSync, Projection, SubscriptionRegistry
from app.store.base import Predicate, RemoteStore, TransientStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterSpec:
    """
    One dashboard number: how many documents of `collection` match
    `predicate` (server side) and `where` (client side, optional).
    """
    name: str
    collection: str
    model: Type[StoredModel] = StoredModel
    predicate: Optional[Predicate] = None
    where: Optional[Callable[[StoredModel], bool]] = None

    def count(self, projection: Projection) -> int:
        if self.where is None:
            return len(projection)
        return sum(1 for record in projection if self.where(record))


class DashboardSummary(BaseModel):
    """Immutable view of the counters handed to the presentation layer."""
    counters: Dict[str, int]
    live: List[str] = []


class DashboardAggregator:
    """Keeps a set of counters current from point-in-time and live reads."""

    def __init__(self, store: RemoteStore, counters: List[CounterSpec]):
        self.store = store
        self.specs = list(counters)
        self._counts: Dict[str, int] = {spec.name: 0 for spec in self.specs}
        self._live: set = set()
        self._on_change: Optional[Callable[[DashboardSummary], None]] = None

    @property
    def summary(self) -> DashboardSummary:
        return DashboardSummary(
            counters=dict(self._counts),
            live=[spec.name for spec in self.specs if spec.name in self._live],
        )

    def _publish(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self.summary)
        except Exception as e:
            logger.error(f"Dashboard callback raised: {e}", exc_info=True)

    def load_initial(self) -> DashboardSummary:
        """Point-in-time count of every counter not yet fed by a live query."""
        for spec in self.specs:
            if spec.name in self._live:
                continue
            try:
                sync = CollectionSync(self.store, spec.collection, spec.model)
                projection = sync.materialize(self.store.read_once(spec.collection, spec.predicate), spec.predicate)
            except TransientStoreError as e:
                logger.warning(f"Initial count of '{spec.name}' failed: {e}")
                continue

            # A live update may have landed while the read was in flight.
            if spec.name not in self._live:
                self._counts[spec.name] = spec.count(projection)

        return self.summary

    def _on_live_update(self, spec: CounterSpec, projection: Projection) -> None:
        self._live.add(spec.name)
        self._counts[spec.name] = spec.count(projection)
        self._publish()

    def mount(
        self,
        on_change: Callable[[DashboardSummary], None],
        registry: SubscriptionRegistry
    ) -> DashboardSummary:
        """
        Publish mount-time counts, then open one live query per counter.

        Every handle goes into `registry`; the caller releases it on unmount.
        """
        self._on_change = on_change
        self.load_initial()
        self._publish()

        for spec in self.specs:
            sync = CollectionSync(self.store, spec.collection, spec.model)
            registry.add(sync.subscribe(
                spec.predicate,
                lambda projection, spec=spec: self._on_live_update(spec, projection),
            ))

        return self.summary


def user_dashboard_counters(user_id: str) -> List[CounterSpec]:
    """Own reports, complaints, registrations and unread notifications."""
    return [
        CounterSpec("lost_found", settings.COLLECTION_LOST_FOUND, LostFoundItem, {"owner_id": user_id}),
        CounterSpec("complaints", settings.COLLECTION_COMPLAINTS, Complaint, {"owner_id": user_id}),
        CounterSpec("volunteer", settings.COLLECTION_VOLUNTEERS, VolunteerRegistration, {"owner_id": user_id}),
        CounterSpec(
            "unread_notifications",
            settings.COLLECTION_NOTIFICATIONS,
            Notification,
            {"recipient_id": user_id},
            where=lambda notification: not notification.read,
        ),
    ]


def admin_dashboard_counters() -> List[CounterSpec]:
    """Users, pending lost/found reports, open complaints, registrations."""
    return [
        CounterSpec("users", settings.COLLECTION_USERS, UserAccount),
        CounterSpec(
            "lost_found_pending",
            settings.COLLECTION_LOST_FOUND,
            LostFoundItem,
            where=lambda item: item.status == LostFoundStatus.PENDING.value,
        ),
        CounterSpec(
            "open_complaints",
            settings.COLLECTION_COMPLAINTS,
            Complaint,
            where=lambda complaint: complaint.status != ComplaintStatus.RESOLVED.value,
        ),
        CounterSpec("volunteers", settings.COLLECTION_VOLUNTEERS, VolunteerRegistration),
    ]
