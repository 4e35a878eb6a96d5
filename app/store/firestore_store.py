"""
Firestore-backed RemoteStore.

Wraps the firebase_admin Firestore client:
- live queries use Query.on_snapshot (the SDK's Watch keeps the stream alive
  and resumes it after transient RPC failures on its own)
- point-in-time reads use Query.stream()
- batches use WriteBatch, committed atomically

Snapshot callbacks are invoked by the SDK on its watch thread. When an event
loop is supplied, every event is handed over to that loop so consumers see a
single thread of control.
"""

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from typing import Any, Dict, List, Optional
import asyncio
import logging

from app.store.base import (
    Predicate,
    RemoteStore,
    SnapshotEvent,
    SnapshotListener,
    StoreDocument,
    TransientStoreError,
    Unsubscribe,
    WriteOperation,
)
from app.utils.firestore_helpers import apply_predicate

logger = logging.getLogger(__name__)

STORE_ERRORS = (google_exceptions.GoogleAPIError, OSError)


class FirestoreRemoteStore(RemoteStore):
    """RemoteStore implementation over a firestore.Client."""

    def __init__(self, db, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.db = db
        self.loop = loop

    def _query(self, collection: str, predicate: Optional[Predicate]):
        return apply_predicate(self.db.collection(collection), predicate)

    def _dispatch(self, listener: SnapshotListener, event: SnapshotEvent) -> None:
        if self.loop is not None and not self.loop.is_closed():
            self.loop.call_soon_threadsafe(listener, event)
        else:
            listener(event)

    def subscribe(
        self,
        collection: str,
        predicate: Optional[Predicate],
        listener: SnapshotListener
    ) -> Unsubscribe:
        def on_snapshot(doc_snapshots, changes, read_time):
            try:
                documents = [
                    StoreDocument(id=snap.id, data=snap.to_dict() or {})
                    for snap in doc_snapshots
                ]
                event = SnapshotEvent(documents=documents)
            except Exception as e:
                logger.warning(f"[FIRESTORE] Failed to read snapshot of '{collection}': {e}")
                event = SnapshotEvent(error=TransientStoreError(str(e), collection))
            self._dispatch(listener, event)

        try:
            watch = self._query(collection, predicate).on_snapshot(on_snapshot)
        except STORE_ERRORS as e:
            logger.warning(f"[FIRESTORE] Could not open live query on '{collection}': {e}")
            self._dispatch(listener, SnapshotEvent(error=TransientStoreError(str(e), collection)))
            return lambda: None

        logger.debug(f"[FIRESTORE] Live query opened on '{collection}' where {predicate or {}}")
        return watch.unsubscribe

    def read_once(self, collection: str, predicate: Optional[Predicate] = None) -> List[StoreDocument]:
        try:
            return [
                StoreDocument(id=doc.id, data=doc.to_dict() or {})
                for doc in self._query(collection, predicate).stream()
            ]
        except STORE_ERRORS as e:
            raise TransientStoreError(f"Read of '{collection}' failed: {e}", collection) from e

    def read_one(self, collection: str, record_id: str) -> Optional[StoreDocument]:
        try:
            snap = self.db.collection(collection).document(record_id).get()
        except STORE_ERRORS as e:
            raise TransientStoreError(f"Read of '{collection}/{record_id}' failed: {e}", collection) from e
        if not snap.exists:
            return None
        return StoreDocument(id=snap.id, data=snap.to_dict() or {})

    def write(self, collection: str, fields: Dict[str, Any], record_id: Optional[str] = None) -> str:
        try:
            if record_id is None:
                doc_ref = self.db.collection(collection).document()
                doc_ref.set({**fields, "created_at": firestore.SERVER_TIMESTAMP})
                return doc_ref.id

            self.db.collection(collection).document(record_id).update(fields)
            return record_id
        except STORE_ERRORS as e:
            raise TransientStoreError(f"Write to '{collection}' failed: {e}", collection) from e

    def batch_write(self, operations: List[WriteOperation]) -> None:
        if not operations:
            return

        batch = self.db.batch()
        for op in operations:
            batch.update(self.db.collection(op.collection).document(op.record_id), op.fields)

        try:
            batch.commit()
        except STORE_ERRORS as e:
            raise TransientStoreError(f"Batch of {len(operations)} writes failed: {e}") from e
