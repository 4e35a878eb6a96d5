"""
Identity models consumed by the core.

The core never authenticates anyone; it receives a Session (user id + role)
from the identity collaborator and treats it as read-only input.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

from app.models.base import StoredModel


class Role(str, Enum):
    """Account roles."""
    ADMIN = "admin"
    USER = "user"


class Session(BaseModel):
    """Current user identity, passed explicitly to every component that needs it."""
    user_id: str = Field(..., min_length=1, description="Identity of the signed-in user")
    role: Role = Field(default=Role.USER, description="admin or user")
    name: Optional[str] = Field(None, description="Display name, stored on submitted records")

    class Config:
        frozen = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class UserAccount(StoredModel):
    """Entry of the users collection (maintained by the auth layer)."""
    name: Optional[str] = None
    email: Optional[str] = None
    role: str = Role.USER.value
