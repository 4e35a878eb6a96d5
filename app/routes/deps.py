"""
Shared route dependencies: the store and the caller's identity.

Identity arrives from the auth layer as headers and is trusted as-is.
"""

from fastapi import Header, HTTPException, status
from typing import Optional

from app.config.firebase import get_store
from app.models.user import Role, Session
from app.store.base import RemoteStore


def store_dependency() -> RemoteStore:
    try:
        return get_store()
    except RuntimeError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database unavailable: {str(e)}"
        )


def session_dependency(
    user_id: str = Header(..., alias="X-User-ID", description="Signed-in user id"),
    role: Role = Header(Role.USER, alias="X-User-Role", description="admin or user"),
    name: Optional[str] = Header(None, alias="X-User-Name", description="Display name")
) -> Session:
    return Session(user_id=user_id, role=role, name=name)


def store_unavailable(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Store temporarily unavailable: {str(e)}"
    )
