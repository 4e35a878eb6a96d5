"""
Notification models.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

from app.models.base import StoredModel


class NotificationCategory(str, Enum):
    """What triggered a notification."""
    COMPLAINT = "complaint"
    LOSTFOUND = "lostfound"
    MATCH = "match"
    INFO = "info"


class Notification(StoredModel):
    """
    A message to one recipient.

    Created only by NotificationHub. `read` only ever flips from False to True.
    """
    recipient_id: str = ""
    message: str = ""
    category: str = NotificationCategory.INFO.value
    read: bool = False


class BroadcastRequest(BaseModel):
    """Admin announcement to every account of the target role."""
    message: str = Field(..., min_length=1, max_length=1000, description="Announcement text")


class BroadcastResult(BaseModel):
    """Outcome of a fan-out: one independent write per recipient."""
    recipients: int = 0
    delivered: int = 0
    failed: int = 0


class MarkReadResult(BaseModel):
    """Outcome of a mark-read action."""
    updated: int = 0
    missing: bool = False
    error: Optional[str] = None
