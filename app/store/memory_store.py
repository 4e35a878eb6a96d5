"""
In-memory RemoteStore for local development (USE_MOCK_DB=true) and tests.

Behaves like the managed store as far as the core can observe:
- document ids are assigned by the store
- created_at is assigned by the store and strictly increasing
- a live query gets its initial snapshot on subscribe, then one event each
  time its result set changes, in order
- batches are all-or-nothing

Optionally persists every collection to a JSON file so a dev server keeps its
data across restarts.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import copy
import json
import logging
import os
import threading
import uuid

from app.store.base import (
    Predicate,
    RemoteStore,
    SnapshotEvent,
    SnapshotListener,
    StoreDocument,
    TransientStoreError,
    Unsubscribe,
    WriteOperation,
    matches,
)

logger = logging.getLogger(__name__)


class _LiveQuery:
    def __init__(self, collection: str, predicate: Optional[Predicate], listener: SnapshotListener):
        self.collection = collection
        self.predicate = dict(predicate or {})
        self.listener = listener
        self.active = True
        self.last: Optional[List[StoreDocument]] = None

    def refresh(self, documents: List[StoreDocument]) -> None:
        if not self.active or documents == self.last:
            return
        self.last = documents
        self.listener(SnapshotEvent(documents=copy.deepcopy(documents)))


class InMemoryRemoteStore(RemoteStore):
    """Dictionary-backed store with live queries."""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._queries: List[_LiveQuery] = []
        self._pending: List[str] = []
        self._dispatching = False
        self._last_timestamp: Optional[datetime] = None
        self._lock = threading.RLock()

        if path and os.path.exists(path):
            self._load()

    # -- persistence -------------------------------------------------------

    def _load(self) -> None:
        with open(self.path, "r") as f:
            raw = json.load(f)

        for name, docs in raw.items():
            for doc_id, data in docs.items():
                created_at = data.get("created_at")
                if isinstance(created_at, str):
                    data["created_at"] = datetime.fromisoformat(created_at)
                    if self._last_timestamp is None or data["created_at"] > self._last_timestamp:
                        self._last_timestamp = data["created_at"]
            self._collections[name] = docs

        logger.info(f"[MOCK DB] Loaded {sum(len(d) for d in raw.values())} documents from {self.path}")

    def _save(self) -> None:
        if not self.path:
            return
        try:
            with open(self.path, "w") as f:
                json.dump(self._collections, f, indent=2, default=str)
        except OSError as e:
            logger.warning(f"[MOCK DB] Failed to persist to {self.path}: {e}")

    # -- internals ---------------------------------------------------------

    def _next_timestamp(self) -> datetime:
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _select(self, collection: str, predicate: Optional[Predicate]) -> List[StoreDocument]:
        docs = self._collections.get(collection, {})
        return [
            StoreDocument(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in docs.items()
            if matches(data, predicate)
        ]

    def _changed(self, collection: str) -> None:
        """Queue a collection for delivery; the outermost caller drains the queue."""
        self._pending.append(collection)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._pending:
                name = self._pending.pop(0)
                for query in list(self._queries):
                    if query.active and query.collection == name:
                        query.refresh(self._select(name, query.predicate))
        finally:
            self._dispatching = False

    # -- RemoteStore -------------------------------------------------------

    def subscribe(
        self,
        collection: str,
        predicate: Optional[Predicate],
        listener: SnapshotListener
    ) -> Unsubscribe:
        query = _LiveQuery(collection, predicate, listener)

        def unsubscribe():
            with self._lock:
                query.active = False
                if query in self._queries:
                    self._queries.remove(query)

        with self._lock:
            self._queries.append(query)
            self._changed(collection)

        return unsubscribe

    def read_once(self, collection: str, predicate: Optional[Predicate] = None) -> List[StoreDocument]:
        with self._lock:
            return self._select(collection, predicate)

    def read_one(self, collection: str, record_id: str) -> Optional[StoreDocument]:
        with self._lock:
            data = self._collections.get(collection, {}).get(record_id)
            if data is None:
                return None
            return StoreDocument(id=record_id, data=copy.deepcopy(data))

    def write(self, collection: str, fields: Dict[str, Any], record_id: Optional[str] = None) -> str:
        with self._lock:
            docs = self._collections.setdefault(collection, {})

            if record_id is None:
                record_id = uuid.uuid4().hex[:20]
                docs[record_id] = {**copy.deepcopy(fields), "created_at": self._next_timestamp()}
            else:
                if record_id not in docs:
                    raise TransientStoreError(f"No document to update: {collection}/{record_id}", collection)
                docs[record_id].update(copy.deepcopy(fields))

            self._save()
            self._changed(collection)
            return record_id

    def batch_write(self, operations: List[WriteOperation]) -> None:
        with self._lock:
            for op in operations:
                if op.record_id not in self._collections.get(op.collection, {}):
                    raise TransientStoreError(
                        f"No document to update: {op.collection}/{op.record_id}", op.collection
                    )

            for op in operations:
                self._collections[op.collection][op.record_id].update(copy.deepcopy(op.fields))

            self._save()
            for name in dict.fromkeys(op.collection for op in operations):
                self._changed(name)

    # -- test/dev hooks ----------------------------------------------------

    def interrupt(self, collection: str, error: Optional[Exception] = None) -> None:
        """
        Simulate a transport failure on every live query of a collection.

        The queries stay registered; the next change re-delivers a full snapshot.
        """
        error = error or TransientStoreError("connection lost", collection)
        with self._lock:
            for query in list(self._queries):
                if query.active and query.collection == collection:
                    query.last = None
                    query.listener(SnapshotEvent(error=error))

    def reconnect(self, collection: str) -> None:
        """Re-deliver the current snapshot to queries interrupted earlier."""
        with self._lock:
            self._changed(collection)

    @property
    def live_query_count(self) -> int:
        return len(self._queries)
