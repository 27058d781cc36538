"""
Incident endpoints - the citizen-facing feed and incident submission.

Feed filtering:
- jurisdiction name given -> that jurisdiction from the catalog, else one
  named by a cached incident (store-only municipalities)
- lat AND lng given -> jurisdiction resolved from the coordinate
- neither -> unresolved, no location narrowing
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from incident_hub.config.firebase import get_incident_store
from incident_hub.models.incident import (
    FeedSnapshot,
    FeedStatus,
    FilterCategory,
    Incident,
    IncidentCreate,
)
from incident_hub.models.jurisdiction import Coordinate, Jurisdiction, JurisdictionKind
from incident_hub.routes.dependencies import get_feed_cache
from incident_hub.services.incident_feed import IncidentFeedCache
from incident_hub.services.incident_filters import filter_incidents
from incident_hub.services.incident_service import JurisdictionUnresolvedError, submit_incident
from incident_hub.services.jurisdiction_catalog import get_catalog
from incident_hub.services.location_resolver import LocationResolver, get_location_resolver
from incident_hub.stores.base import IncidentStore

logger = logging.getLogger(__name__)


class IncidentFeedResponse(BaseModel):
    jurisdiction: Optional[Jurisdiction] = None
    is_default_jurisdiction: bool = False
    category: FilterCategory
    feed_status: FeedStatus
    last_updated: Optional[datetime] = None
    error: Optional[str] = None
    count: int
    incidents: List[Incident]


router = APIRouter(prefix="/incidents", tags=["Incidents"])


def _feed_jurisdiction(incidents: List[Incident], name: str) -> Optional[Jurisdiction]:
    """
    Jurisdiction known only to the store (e.g. a local municipality the
    catalog does not list), taken from the first cached incident naming it.
    """
    wanted = name.strip().lower()
    for incident in incidents:
        if incident.jurisdiction_name and incident.jurisdiction_name.strip().lower() == wanted:
            return Jurisdiction(
                name=incident.jurisdiction_name,
                kind=JurisdictionKind.LOCAL,
                province=incident.province or "",
            )
    return None


@router.get("", response_model=IncidentFeedResponse)
async def list_incidents(
    lat: Optional[float] = Query(None, description="Citizen latitude"),
    lng: Optional[float] = Query(None, description="Citizen longitude"),
    jurisdiction: Optional[str] = Query(None, description="Jurisdiction name, overrides lat/lng"),
    category: FilterCategory = Query(FilterCategory.ALL),
    cache: IncidentFeedCache = Depends(get_feed_cache),
    resolver: LocationResolver = Depends(get_location_resolver),
):
    """
    Incidents near the citizen, newest first.

    A stale feed is still served; feed_status and error say so.
    """
    resolved: Optional[Jurisdiction] = None
    is_default = False

    if jurisdiction:
        resolved = get_catalog().find(jurisdiction) or _feed_jurisdiction(cache.current(), jurisdiction)
        if resolved is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown jurisdiction: {jurisdiction}",
            )
    elif lat is not None and lng is not None:
        resolution = resolver.locate(Coordinate(lat, lng))
        resolved = resolution.jurisdiction
        is_default = resolution.is_default

    snapshot = cache.snapshot()
    incidents = filter_incidents(snapshot.incidents, resolved, category)
    return IncidentFeedResponse(
        jurisdiction=resolved,
        is_default_jurisdiction=is_default,
        category=category,
        feed_status=snapshot.status,
        last_updated=snapshot.last_updated,
        error=snapshot.error,
        count=len(incidents),
        incidents=incidents,
    )


@router.post("/refresh", response_model=FeedSnapshot)
async def refresh_incidents(cache: IncidentFeedCache = Depends(get_feed_cache)):
    """Manual refresh: re-run the bulk read now."""
    return await cache.refresh()


@router.post("", response_model=Incident, status_code=status.HTTP_201_CREATED)
async def create_incident(
    payload: IncidentCreate,
    store: IncidentStore = Depends(get_incident_store),
    resolver: LocationResolver = Depends(get_location_resolver),
):
    """
    Submit a new citizen incident.

    The incident starts as pending; severity maps to priority
    (1-2 low, 3 medium, 4 high, 5 critical).
    """
    logger.info(f"📝 POST /incidents - type={payload.incident_type.value}, severity={payload.severity}")
    try:
        # Store calls block; keep them off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, submit_incident, store, payload, resolver)
    except JurisdictionUnresolvedError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except Exception as e:
        logger.error(f"❌ POST /incidents - submission failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Incident submission failed: {e}",
        )
