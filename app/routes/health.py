"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, HTTPException
from datetime import datetime

from app.config.firebase import get_store
from app.core.settings import settings
from app.store.base import TransientStoreError


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/db")
async def database_health():
    """
    Store connectivity check.
    Runs a point-in-time read of the users collection.
    """
    try:
        store = get_store()
        users = store.read_once(settings.COLLECTION_USERS)

        return {
            "status": "healthy",
            "database": store.get_name(),
            "connected": True,
            "users_count": len(users),
            "timestamp": datetime.utcnow().isoformat()
        }
    except (RuntimeError, TransientStoreError) as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )
