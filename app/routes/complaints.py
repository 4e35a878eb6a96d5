"""
Complaint routes - submission, own and admin views, admin status.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import List, Optional
import logging

from app.models.base import StatusUpdateRequest
from app.models.complaint import Complaint, ComplaintCreate
from app.models.user import Session
from app.routes.deps import session_dependency, store_dependency, store_unavailable
from app.services.notification_hub import NotificationHub
from app.services.record_service import RecordService, SubmissionResult
from app.services.workflow_controller import RecordKind, TransitionResult, WorkflowController
from app.store.base import RemoteStore, TransientStoreError
from app.utils.sse import sse_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/complaints", tags=["Complaints"])


@router.post("", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED)
async def submit_complaint(
    payload: ComplaintCreate,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """File a complaint. It starts as Submitted."""
    try:
        return RecordService(store, session).submit_complaint(payload)
    except TransientStoreError as e:
        logger.warning(f"Complaint submission by {session.user_id} failed: {e}")
        raise store_unavailable(e)


@router.get("/mine", response_model=List[Complaint])
async def list_my_complaints(
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Own complaints, newest first (point-in-time)."""
    try:
        return RecordService(store, session).list_own_complaints()
    except TransientStoreError as e:
        raise store_unavailable(e)


@router.get("/mine/stream")
async def stream_my_complaints(
    request: Request,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Server-Sent Events: own complaints, newest first, on every change."""
    service = RecordService(store, session)

    def start(registry, push):
        registry.add(service.watch_own_complaints(push))

    return sse_response(request, "complaints", start)


@router.get("", response_model=List[Complaint])
async def list_all_complaints(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: every complaint, newest first, optionally filtered by status and category."""
    try:
        return RecordService(store, session).list_all_complaints(status_filter, category)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except TransientStoreError as e:
        raise store_unavailable(e)


@router.get("/stream")
async def stream_all_complaints(
    request: Request,
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """
    Admin: Server-Sent Events of the complaint table.

    The status and category filters become part of the live query.
    """
    service = RecordService(store, session)
    try:
        service.require_admin("watch all complaints")
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    def start(registry, push):
        registry.add(service.watch_all_complaints(push, status_filter, category))

    return sse_response(request, "complaints", start)


@router.patch("/{complaint_id}/status", response_model=TransitionResult)
async def update_complaint_status(
    complaint_id: str,
    request: StatusUpdateRequest,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """
    Admin: set Submitted / In Progress / Resolved and notify the owner.

    Any status can follow any other; skipping In Progress is allowed.
    """
    controller = WorkflowController(store, NotificationHub(store), session)
    try:
        result = controller.transition(RecordKind.COMPLAINT, complaint_id, request.status, request.owner_id)
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
