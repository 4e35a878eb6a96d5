"""
Pydantic models for complaints.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

from app.models.base import RecordBase


class ComplaintStatus(str, Enum):
    """
    Complaint workflow labels: Submitted → In Progress → Resolved.
    Any label can be assigned from any other; ordering is not enforced.
    """
    SUBMITTED = "Submitted"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class ComplaintCreate(BaseModel):
    """Fields a user provides when filing a complaint."""
    title: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=200)
    urgency: Optional[str] = Field(None, max_length=50)

    class Config:
        extra = "ignore"


class Complaint(RecordBase):
    """A complaint as stored."""
    title: Optional[str] = ""
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    urgency: Optional[str] = None
    status: str = ComplaintStatus.SUBMITTED.value
