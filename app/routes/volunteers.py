"""
Volunteer routes - event catalog, sign-up, own and admin registration views.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import List, Optional

from app.models.user import Session
from app.models.volunteer import EVENTS, RegistrationResult, VolunteerCreate, VolunteerEvent, VolunteerRegistration
from app.routes.deps import session_dependency, store_dependency, store_unavailable
from app.services.record_service import RecordService
from app.services.registration_guard import RegistrationGuard
from app.store.base import RemoteStore, TransientStoreError
from app.utils.sse import sse_response


router = APIRouter(prefix="/volunteers", tags=["Volunteers"])


@router.get("/events", response_model=List[VolunteerEvent])
async def list_events():
    """Events open for registration."""
    return EVENTS


@router.post("/register", response_model=RegistrationResult)
async def register(
    payload: VolunteerCreate,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """
    Sign up for a catalog event.

    A second registration for the same event is rejected with 409, an event
    outside the catalog with 404.
    """
    result = RegistrationGuard(store).register(session.user_id, payload.event_id, payload, user_name=session.name)

    if result.reason == "unknown_event":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.message)
    if result.reason == "already_registered":
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.message)
    if result.reason == "store_unavailable":
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result.message)
    return result


@router.get("/mine", response_model=List[VolunteerRegistration])
async def list_my_registrations(
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Own registrations, newest first (point-in-time)."""
    try:
        return RecordService(store, session).list_own_registrations()
    except TransientStoreError as e:
        raise store_unavailable(e)


@router.get("/mine/stream")
async def stream_my_registrations(
    request: Request,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Server-Sent Events: own registrations on every change."""
    service = RecordService(store, session)

    def start(registry, push):
        registry.add(service.watch_own_registrations(push))

    return sse_response(request, "volunteers", start)


@router.get("", response_model=List[VolunteerRegistration])
async def list_all_registrations(
    event_id: Optional[str] = Query(None),
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: every registration, optionally for one event."""
    try:
        return RecordService(store, session).list_all_registrations(event_id)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except TransientStoreError as e:
        raise store_unavailable(e)


@router.get("/stream")
async def stream_all_registrations(
    request: Request,
    event_id: Optional[str] = Query(None),
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Admin: Server-Sent Events of the registration table."""
    service = RecordService(store, session)
    try:
        service.require_admin("watch all volunteer registrations")
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    def start(registry, push):
        registry.add(service.watch_all_registrations(push, event_id))

    return sse_response(request, "volunteers", start)
