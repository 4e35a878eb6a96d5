"""
Collection Sync - live, ordered projections of one filtered query.

DESIGN PRINCIPLES:
- Every store event rebuilds the projection in full (no incremental patching)
- Projection = exactly the matching documents, each once, newest first
- Documents without a server timestamp yet sort last
- A transport error publishes an empty projection; retrying is the store's job
- Whoever subscribes owns the handle and must cancel it on teardown
"""

from pydantic import ValidationError
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type
import logging

from app.models.base import StoredModel
from app.store.base import (
    Predicate,
    RemoteStore,
    SnapshotEvent,
    StoreDocument,
    TransientStoreError,
    matches,
)

logger = logging.getLogger(__name__)


Projection = Tuple[StoredModel, ...]
UpdateCallback = Callable[[Projection], None]


def newest_first(records: Sequence[StoredModel]) -> List[StoredModel]:
    """Sort by created_at descending; missing timestamps count as time zero."""
    return sorted(records, key=lambda record: record.sort_timestamp, reverse=True)


class Subscription:
    """
    Cancel handle for one live query.

    Holds the latest projection and forwards every rebuilt projection to the
    owner's callback until cancelled.
    """

    def __init__(self, sync: "CollectionSync", predicate: Optional[Predicate], on_update: UpdateCallback):
        self.sync = sync
        self.predicate: Predicate = dict(predicate or {})
        self.on_update = on_update
        self.active = True
        self.projection: Projection = ()
        self._unsubscribe: Optional[Callable[[], None]] = None

    def _start(self) -> None:
        try:
            self._unsubscribe = self.sync.store.subscribe(self.sync.collection, self.predicate, self._on_event)
        except TransientStoreError as e:
            self._on_event(SnapshotEvent(error=e))

        # Cancelled from inside the initial delivery, before the store handed back its unsubscribe.
        if not self.active and self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_event(self, event: SnapshotEvent) -> None:
        if not self.active:
            return

        if not event.ok:
            logger.warning(
                f"Live query on '{self.sync.collection}' where {self.predicate} failed: {event.error}. "
                f"Showing empty result until the store reconnects."
            )
            self._publish(())
            return

        self._publish(self.sync.materialize(event.documents, self.predicate))

    def _publish(self, projection: Projection) -> None:
        self.projection = projection
        try:
            self.on_update(projection)
        except Exception as e:
            logger.error(f"Update callback for '{self.sync.collection}' raised: {e}", exc_info=True)

    def cancel(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        logger.debug(f"Live query on '{self.sync.collection}' where {self.predicate} cancelled")


class CollectionSync:
    """
    Live projections over one collection.

    Each subscribe() call opens its own filtered query and returns its own
    Subscription; projections are never shared between subscribers.
    """

    def __init__(self, store: RemoteStore, collection: str, model: Type[StoredModel] = StoredModel):
        self.store = store
        self.collection = collection
        self.model = model

    def subscribe(self, predicate: Optional[Predicate], on_update: UpdateCallback) -> Subscription:
        """
        Open a live query filtered by equality `predicate`.

        `on_update` receives the initial projection and every rebuilt one after.
        """
        subscription = Subscription(self, predicate, on_update)
        subscription._start()
        return subscription

    def materialize(self, documents: Sequence[StoreDocument], predicate: Optional[Predicate] = None) -> Projection:
        """Turn raw documents into a deduplicated, newest-first tuple of models."""
        by_id: Dict[str, StoredModel] = {}
        for doc in documents:
            if not matches(doc.data, predicate):
                continue
            try:
                by_id[doc.id] = self.model.from_document(doc)
            except ValidationError as e:
                logger.warning(f"Skipping malformed document {self.collection}/{doc.id}: {e}")

        return tuple(newest_first(list(by_id.values())))


class SubscriptionRegistry:
    """
    Cancel handles owned by one view lifecycle.

    Use as a context manager, or call close() from a finally block, so every
    handle is released on every exit path, including a failed initialisation.
    """

    def __init__(self):
        self._handles: List[Subscription] = []

    def add(self, handle: Subscription) -> Subscription:
        self._handles.append(handle)
        return handle

    def close(self) -> None:
        handles, self._handles = self._handles, []
        for handle in handles:
            try:
                handle.cancel()
            except Exception as e:
                logger.error(f"Failed to cancel live query on '{handle.sync.collection}': {e}", exc_info=True)

    def __len__(self) -> int:
        return len(self._handles)

    def __enter__(self) -> "SubscriptionRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
