"""
Admin endpoints - municipal staff triage.

SCOPE OF ADMIN:
✅ Change incident status (pending, in_progress, resolved, closed)
✅ Set an estimated resolution time
✅ Post an update message for the reporter
✅ View summary analytics

❌ NOT delete incidents
❌ NOT edit citizen-submitted content
"""

import asyncio
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from incident_hub.config.firebase import get_incident_store
from incident_hub.models.incident import Incident, StatusUpdateRequest
from incident_hub.routes.dependencies import get_feed_cache
from incident_hub.services.analytics_service import IncidentAnalytics, counts_by_jurisdiction, summarize_incidents
from incident_hub.services.incident_feed import IncidentFeedCache
from incident_hub.services.incident_service import IncidentNotFoundError, update_incident_status
from incident_hub.stores.base import IncidentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.patch("/incidents/{incident_id}/status", response_model=Incident)
async def change_incident_status(
    incident_id: str,
    request: StatusUpdateRequest,
    store: IncidentStore = Depends(get_incident_store),
):
    """
    Update an incident's status.

    Resolving stamps resolved_at. A message is stored as an incident update.
    """
    try:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, update_incident_status, store, incident_id, request)
    except IncidentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update incident {incident_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update incident: {e}",
        )


@router.get("/analytics", response_model=IncidentAnalytics)
async def incident_analytics(cache: IncidentFeedCache = Depends(get_feed_cache)):
    """Totals, resolution time and distributions over the cached feed."""
    return summarize_incidents(cache.current())


@router.get("/analytics/jurisdictions", response_model=Dict[str, int])
async def open_incidents_by_jurisdiction(cache: IncidentFeedCache = Depends(get_feed_cache)):
    """Open incident counts per jurisdiction."""
    return counts_by_jurisdiction(cache.current())
