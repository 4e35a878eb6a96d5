"""
User directory routes - admin view of the accounts collection.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import List

from app.models.user import Session, UserAccount
from app.routes.deps import session_dependency, store_dependency, store_unavailable
from app.services.record_service import RecordService
from app.store.base import RemoteStore, TransientStoreError
from app.utils.sse import sse_response


router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserAccount])
async def list_users(
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: every account, newest first."""
    try:
        return RecordService(store, session).list_users()
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except TransientStoreError as e:
        raise store_unavailable(e)


@router.get("/stream")
async def stream_users(
    request: Request,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: Server-Sent Events of the account list."""
    service = RecordService(store, session)
    try:
        service.require_admin("watch users")
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    def start(registry, push):
        registry.add(service.watch_users(push))

    return sse_response(request, "users", start)
