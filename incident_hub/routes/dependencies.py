"""
Shared FastAPI dependencies.
"""

from fastapi import HTTPException, Request, status

from incident_hub.services.incident_feed import IncidentFeedCache


def get_feed_cache(request: Request) -> IncidentFeedCache:
    """The feed cache started with the app; 503 when the store never came up."""
    cache = getattr(request.app.state, "feed_cache", None)
    if cache is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Incident feed is not available. Check the incident store configuration.",
        )
    return cache
