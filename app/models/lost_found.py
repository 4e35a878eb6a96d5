"""
Pydantic models for lost & found reports.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

from app.models.base import RecordBase


class LostFoundStatus(str, Enum):
    """
    Admin-assigned status of a lost/found report.
    Pending → Found (label implies resolution).
    """
    PENDING = "Pending"
    FOUND = "Found"


class ItemType(str, Enum):
    """Whether the reporter lost the item or found it."""
    LOST = "lost"
    FOUND = "found"


class LostFoundCreate(BaseModel):
    """Fields a user provides when reporting a lost or found item."""
    title: str = Field(..., min_length=1, max_length=200, description="Short title, used for keyword matching")
    item_type: ItemType = Field(..., description="lost or found")
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    image_url: Optional[str] = Field(None, description="Uploaded image URL (upload handled elsewhere)")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Lost Brown Wallet",
                "item_type": "lost",
                "description": "Leather wallet with student card",
                "category": "Accessories",
                "location": "Main bus stop",
            }
        }
        extra = "ignore"


class LostFoundItem(RecordBase):
    """A lost/found report as stored."""
    title: Optional[str] = ""
    item_type: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    status: str = LostFoundStatus.PENDING.value
