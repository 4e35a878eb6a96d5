"""
Remote Store Base Interface.

Defines the contract between the sync/notification core and the managed
document store. The core never talks to a database SDK directly; it only
uses these operations:

- subscribe: live query (initial snapshot + every later change, until cancelled)
- read_once: point-in-time query
- read_one: point-in-time read of one document by id
- write: create (no id) or update (with id) a single document
- batch_write: atomic multi-document update

Predicates are conjunctions of equality constraints, passed as a dict of
{field: value}.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


Predicate = Dict[str, Any]


class TransientStoreError(Exception):
    """
    Subscription, read or write failure caused by connectivity or the backend.

    Always caught by the core and degraded to "show nothing / show stale data".
    """

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(message)
        self.collection = collection


@dataclass(frozen=True)
class StoreDocument:
    """One document as returned by the store: its id and raw field data."""
    id: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class SnapshotEvent:
    """
    One delivery on a live subscription.

    Either `documents` is the full current result set of the query, or
    `error` is set and `documents` is empty.
    """
    documents: List[StoreDocument] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class WriteOperation:
    """One update inside an atomic batch."""
    collection: str
    record_id: str
    fields: Dict[str, Any]


SnapshotListener = Callable[[SnapshotEvent], None]
Unsubscribe = Callable[[], None]


def matches(data: Dict[str, Any], predicate: Optional[Predicate]) -> bool:
    """True when every equality constraint in `predicate` holds for `data`."""
    if not predicate:
        return True
    return all(data.get(key) == value for key, value in predicate.items())


class RemoteStore(ABC):
    """
    Abstract document store.

    Implementations: FirestoreRemoteStore (production) and
    InMemoryRemoteStore (mock DB mode and tests).
    """

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        predicate: Optional[Predicate],
        listener: SnapshotListener
    ) -> Unsubscribe:
        """
        Start a live query.

        The listener receives an initial full snapshot followed by one event
        per change, in the order the store emits them. Returns a callable that
        stops delivery.
        """
        pass

    @abstractmethod
    def read_once(self, collection: str, predicate: Optional[Predicate] = None) -> List[StoreDocument]:
        """
        Point-in-time query.

        Raises:
            TransientStoreError: if the store cannot be reached
        """
        pass

    @abstractmethod
    def read_one(self, collection: str, record_id: str) -> Optional[StoreDocument]:
        """
        Point-in-time read of one document by id.

        Returns:
            The document, or None if it does not exist

        Raises:
            TransientStoreError: if the store cannot be reached
        """
        pass

    @abstractmethod
    def write(self, collection: str, fields: Dict[str, Any], record_id: Optional[str] = None) -> str:
        """
        Create a document (record_id omitted) or update an existing one.

        New documents get a server-assigned `created_at`.

        Returns:
            The document id

        Raises:
            TransientStoreError: if the write fails
        """
        pass

    @abstractmethod
    def batch_write(self, operations: List[WriteOperation]) -> None:
        """
        Apply all updates atomically: either every operation is visible to
        subscribers or none is.

        Raises:
            TransientStoreError: if the batch fails
        """
        pass

    def get_name(self) -> str:
        """Get store name for logging."""
        return self.__class__.__name__
