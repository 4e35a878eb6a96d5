"""
Remote store adapters.

The sync/notification core only depends on RemoteStore; which backend sits
behind it is decided once in app.config.firebase.
"""

from app.store.base import (
    Predicate,
    RemoteStore,
    SnapshotEvent,
    StoreDocument,
    TransientStoreError,
    WriteOperation,
)
from app.store.firestore_store import FirestoreRemoteStore
from app.store.memory_store import InMemoryRemoteStore

__all__ = [
    "Predicate",
    "RemoteStore",
    "SnapshotEvent",
    "StoreDocument",
    "TransientStoreError",
    "WriteOperation",
    "FirestoreRemoteStore",
    "InMemoryRemoteStore",
]
