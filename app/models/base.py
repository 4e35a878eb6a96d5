"""
Base models for documents read from the remote store.

DESIGN PRINCIPLE:
- Every collection has its own tagged model, validated at the store boundary
- Reads are lenient (unknown extra fields ignored, missing fields defaulted)
- Status values are checked when they are written, not when they are read
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from app.store.base import StoreDocument


class StoredModel(BaseModel):
    """A document with its store-assigned id and server timestamp."""
    id: str
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @classmethod
    def from_document(cls, doc: StoreDocument):
        return cls(**{**doc.data, "id": doc.id})

    @property
    def sort_timestamp(self) -> float:
        """
        Seconds since epoch used for newest-first ordering.

        Documents still waiting for their server timestamp count as time zero.
        """
        if self.created_at is None:
            return 0.0
        return self.created_at.timestamp()


class RecordBase(StoredModel):
    """
    Common shape of lost/found items, complaints and volunteer registrations.
    Content belongs to the submitter; status belongs to admins after submission.
    """
    owner_id: str = ""
    owner_name: Optional[str] = None
    status: str = ""


class StatusUpdateRequest(BaseModel):
    """
    Admin request to change a record's status.
    The owner notified is read from the record; owner_id is a fallback for
    records stored without one.
    """
    status: str = Field(..., min_length=1, description="New status label")
    owner_id: Optional[str] = Field(None, description="Fallback owner for records without owner_id")
