"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and feed staleness.
"""

from fastapi import APIRouter, Depends

from incident_hub.core.settings import settings
from incident_hub.routes.dependencies import get_feed_cache
from incident_hub.services.incident_feed import IncidentFeedCache
from incident_hub.utils.timestamps import utc_now


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
        "timestamp": utc_now().isoformat(),
    }


@router.get("/feed")
async def feed_health(cache: IncidentFeedCache = Depends(get_feed_cache)):
    """
    Incident feed status.
    'stale' means the last read failed and cached incidents are being served.
    """
    snapshot = cache.snapshot()
    return {
        "status": snapshot.status.value,
        "incident_count": len(snapshot.incidents),
        "last_updated": snapshot.last_updated.isoformat() if snapshot.last_updated else None,
        "error": snapshot.error,
        "timestamp": utc_now().isoformat(),
    }
