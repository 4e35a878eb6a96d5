"""
Volunteer event catalog and registration models.
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from app.models.base import RecordBase


REGISTERED_STATUS = "Registered"


class VolunteerEvent(BaseModel):
    """An event users can sign up for."""
    id: str
    title: str
    date: str
    location: str
    image: Optional[str] = None
    featured: bool = False


EVENTS: List[VolunteerEvent] = [
    VolunteerEvent(
        id="community-cleanup",
        title="Community Cleanup",
        date="Saturday, 22nd June",
        location="City Park",
        image="https://images.unsplash.com/photo-1532996122724-e3c354a0b15b?w=400&q=80",
        featured=True,
    ),
    VolunteerEvent(
        id="tech-workshop",
        title="Tech Workshop",
        date="June 5",
        location="SMIT Campus",
        image="https://images.unsplash.com/photo-1517245386807-bb43f82c33c4?w=400&q=80",
    ),
    VolunteerEvent(
        id="health-camp",
        title="Health Camp",
        date="June 12",
        location="Community Center",
        image="https://images.unsplash.com/photo-1576091160399-112ba8d25d1d?w=400&q=80",
    ),
]


def get_event(event_id: str) -> Optional[VolunteerEvent]:
    for event in EVENTS:
        if event.id == event_id:
            return event
    return None


class VolunteerCreate(BaseModel):
    """Registration form payload."""
    event_id: str = Field(..., min_length=1)
    event_title: Optional[str] = Field(None, description="Defaults to the catalog title")
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    availability: Optional[str] = Field(None, max_length=100)
    skills: Optional[str] = Field(None, max_length=500)

    class Config:
        extra = "ignore"


class VolunteerRegistration(RecordBase):
    """A registration as stored; at most one per (owner_id, event_id)."""
    event_id: str = ""
    event_title: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    availability: Optional[str] = None
    skills: Optional[str] = None
    status: str = REGISTERED_STATUS


class RegistrationResult(BaseModel):
    """
    Outcome of a registration attempt.
    A rejection is a normal result, not an error.
    """
    accepted: bool
    registration_id: Optional[str] = None
    reason: Optional[str] = None
    message: str = ""
