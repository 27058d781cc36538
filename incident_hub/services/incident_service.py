"""
Incident service - citizen submission and staff status updates.

Writes go straight to the external store; the feed cache picks them up
through the store's change stream like any other change.
"""

import logging
from typing import Any, Dict, Optional

from incident_hub.models.incident import (
    SEVERITY_TO_PRIORITY,
    Incident,
    IncidentCreate,
    IncidentStatus,
    StatusUpdateRequest,
)
from incident_hub.models.jurisdiction import Coordinate
from incident_hub.services.location_resolver import LocationResolver
from incident_hub.stores.base import IncidentStore
from incident_hub.utils.timestamps import utc_now

logger = logging.getLogger(__name__)


class IncidentNotFoundError(LookupError):
    pass


class JurisdictionUnresolvedError(ValueError):
    pass


def build_title(incident_type: str, cause: Optional[str]) -> str:
    """e.g. 'Water Issue - Burst pipe' or 'Roads Issue - Reported by citizen'."""
    label = incident_type[:1].upper() + incident_type[1:]
    return f"{label} Issue - {cause or 'Reported by citizen'}"


def _resolve_jurisdiction_id(
    store: IncidentStore,
    payload: IncidentCreate,
    resolver: LocationResolver,
) -> str:
    """
    Priority order:
    1. jurisdiction_id sent by the client (e.g. from the citizen's profile)
    2. jurisdiction_name looked up in the store
    3. Jurisdiction resolved from the coordinates, looked up by name
    """
    if payload.jurisdiction_id:
        return payload.jurisdiction_id

    candidates = []
    if payload.jurisdiction_name:
        candidates.append(payload.jurisdiction_name)

    resolution = None
    if payload.latitude is not None and payload.longitude is not None:
        resolution = resolver.locate(Coordinate(payload.latitude, payload.longitude))
    if resolution is not None and not resolution.is_default:
        candidates.append(resolution.jurisdiction.name)

    for name in candidates:
        jurisdiction_id = store.find_jurisdiction_id(name)
        if jurisdiction_id:
            return jurisdiction_id

    raise JurisdictionUnresolvedError(
        "We couldn't detect your municipality. Set your municipality and try again."
    )


def submit_incident(
    store: IncidentStore,
    payload: IncidentCreate,
    resolver: LocationResolver,
) -> Incident:
    """
    Create a pending incident from a citizen report.

    Raises:
        JurisdictionUnresolvedError: If no jurisdiction id can be determined
    """
    jurisdiction_id = _resolve_jurisdiction_id(store, payload, resolver)
    incident_type = payload.incident_type.value
    now = utc_now()

    row: Dict[str, Any] = {
        "reporter_id": payload.reporter_id,
        "jurisdiction_id": jurisdiction_id,
        "incident_type": incident_type,
        "priority": SEVERITY_TO_PRIORITY[payload.severity].value,
        "status": IncidentStatus.PENDING.value,
        "title": build_title(incident_type, payload.cause),
        "description": payload.description,
        "location_lat": payload.latitude,
        "location_lng": payload.longitude,
        "location_address": payload.location,
        "images": payload.images or None,
        "created_at": now,
        "updated_at": now,
    }

    created = store.insert_incident(row)
    logger.info(f"Incident {created['id']} submitted: type={incident_type}, jurisdiction={jurisdiction_id}")
    return Incident.from_row(store.get_incident(created["id"]) or created)


def update_incident_status(
    store: IncidentStore,
    incident_id: str,
    request: StatusUpdateRequest,
) -> Incident:
    """
    Apply a staff status change, stamping resolved_at on resolution and
    recording the optional message as an incident update.

    Raises:
        IncidentNotFoundError: If the incident does not exist
    """
    if store.get_incident(incident_id) is None:
        raise IncidentNotFoundError(f"Incident {incident_id} not found")

    now = utc_now()
    updates: Dict[str, Any] = {
        "status": request.status.value,
        "updated_at": now,
    }
    if request.status == IncidentStatus.RESOLVED:
        updates["resolved_at"] = now
    if request.eta is not None:
        updates["estimated_resolution_time"] = request.eta

    store.update_incident(incident_id, updates)

    if request.message:
        store.add_incident_update({
            "incident_id": incident_id,
            "user_id": request.updated_by,
            "message": request.message,
            "status": request.status.value,
            "eta_update": request.eta,
            "created_at": now,
        })

    logger.info(f"Incident {incident_id} status -> {request.status.value}")
    return Incident.from_row(store.get_incident(incident_id) or {"id": incident_id, **updates})
