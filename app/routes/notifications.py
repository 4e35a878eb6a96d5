"""
Notification routes - live feed, read-state, admin broadcast.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.models.notification import BroadcastRequest, BroadcastResult, MarkReadResult
from app.models.user import Session
from app.routes.deps import session_dependency, store_dependency
from app.services.broadcast_service import BroadcastService
from app.services.notification_hub import NotificationHub
from app.store.base import RemoteStore
from app.utils.sse import sse_response


router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/stream")
async def stream_notifications(
    request: Request,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """
    Server-Sent Events: the caller's notifications, newest first.

    One `notifications` event per change; an empty list while the store is
    unreachable.
    """
    hub = NotificationHub(store)

    def start(registry, push):
        registry.add(hub.subscribe(session.user_id, push))

    return sse_response(request, "notifications", start)


@router.post("/read-all", response_model=MarkReadResult)
async def mark_all_read(
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Mark every unread notification of the caller as read, atomically."""
    result = NotificationHub(store).mark_all_read(session.user_id)
    if result.error:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result.error)
    return result


@router.post("/{notification_id}/read", response_model=MarkReadResult)
async def mark_one_read(
    notification_id: str,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Mark one of the caller's notifications as read."""
    result = NotificationHub(store).mark_one_read(notification_id, recipient_id=session.user_id)
    if result.missing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error)
    if result.error:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result.error)
    return result


@router.post("/broadcast", response_model=BroadcastResult)
async def broadcast(
    request: BroadcastRequest,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: send an announcement to every user account."""
    service = BroadcastService(store, NotificationHub(store), session)
    try:
        return service.broadcast(request.message)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
