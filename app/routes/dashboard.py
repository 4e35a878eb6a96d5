"""
Dashboard routes - summary counters for the caller's role.
"""

from fastapi import APIRouter, Depends, Request

from app.models.user import Session
from app.routes.deps import session_dependency, store_dependency
from app.services.dashboard import (
    DashboardAggregator,
    DashboardSummary,
    admin_dashboard_counters,
    user_dashboard_counters,
)
from app.store.base import RemoteStore
from app.utils.sse import sse_response


router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def aggregator_for(session: Session, store: RemoteStore) -> DashboardAggregator:
    if session.is_admin:
        return DashboardAggregator(store, admin_dashboard_counters())
    return DashboardAggregator(store, user_dashboard_counters(session.user_id))


@router.get("", response_model=DashboardSummary)
async def get_dashboard(
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """Point-in-time counters (admin or user set, by role)."""
    return aggregator_for(session, store).load_initial()


@router.get("/stream")
async def stream_dashboard(
    request: Request,
    session: Session = Depends(session_dependency),
    store: RemoteStore = Depends(store_dependency)
):
    """
    Server-Sent Events: mount-time counters first, then live ones.
    """
    aggregator = aggregator_for(session, store)

    def start(registry, push):
        aggregator.mount(push, registry)

    return sse_response(request, "dashboard", start)
