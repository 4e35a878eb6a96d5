"""
Lost & found routes - submission with keyword matching, own and admin views, admin status.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import List, Optional
import logging

from app.models.base import StatusUpdateRequest
from app.models.lost_found import LostFoundCreate, LostFoundItem
from app.models.user import Session
from app.routes.deps import session_dependency, store_dependency, store_unavailable
from app.services.matching_engine import MatchingEngine
from app.services.notification_hub import NotificationHub
from app.services.record_service import RecordService, SubmissionResult
from app.services.workflow_controller import RecordKind, TransitionResult, WorkflowController
from app.store.base import RemoteStore, TransientStoreError
from app.utils.sse import sse_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lost-found", tags=["Lost & Found"])


@router.post("", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED)
async def submit_item(
    payload: LostFoundCreate,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """
    Report a lost or found item.

    The response lists existing reports whose titles share a keyword; their
    owners and the submitter are notified.
    """
    matching = MatchingEngine(store, NotificationHub(store))
    try:
        return RecordService(store, session, matching).submit_lost_found(payload)
    except TransientStoreError as e:
        logger.warning(f"Lost/found submission by {session.user_id} failed: {e}")
        raise store_unavailable(e)


@router.get("/mine", response_model=List[LostFoundItem])
async def list_my_items(
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Own reports, newest first (point-in-time)."""
    try:
        return RecordService(store, session).list_own_lost_found()
    except TransientStoreError as e:
        raise store_unavailable(e)


@router.get("/mine/stream")
async def stream_my_items(
    request: Request,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Server-Sent Events: own reports, newest first, on every change."""
    service = RecordService(store, session)

    def start(registry, push):
        registry.add(service.watch_own_lost_found(push))

    return sse_response(request, "lost_found", start)


@router.get("", response_model=List[LostFoundItem])
async def list_all_items(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: every report, newest first, optionally filtered by status and category."""
    try:
        return RecordService(store, session).list_all_lost_found(status_filter, category)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except TransientStoreError as e:
        raise store_unavailable(e)


@router.get("/stream")
async def stream_all_items(
    request: Request,
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: Server-Sent Events of the full report table."""
    service = RecordService(store, session)
    try:
        service.require_admin("watch all lost & found reports")
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    def start(registry, push):
        registry.add(service.watch_all_lost_found(push, status_filter, category))

    return sse_response(request, "lost_found", start)


@router.patch("/{item_id}/status", response_model=TransitionResult)
async def update_item_status(
    item_id: str,
    request: StatusUpdateRequest,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: set Pending/Found and notify the owner."""
    controller = WorkflowController(store, NotificationHub(store), session)
    try:
        result = controller.transition(RecordKind.LOST_FOUND, item_id, request.status, request.owner_id)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if result.missing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error)
    if not result.updated:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to update status: {result.error}"
        )
    return result
