"""
Pydantic models for municipal incidents.

Incident rows come from the external store with the store's column names
(incident_type, priority, location_lat, ...). Incident.from_row maps them to
the shape served to clients and consumed by the filter pipeline.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from incident_hub.models.jurisdiction import Coordinate, Jurisdiction
from incident_hub.utils.timestamps import parse_timestamp


class IncidentType(str, Enum):
    WATER = "water"
    ELECTRICITY = "electricity"
    ROADS = "roads"
    WASTE = "waste"
    OTHER = "other"


class IncidentPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class FilterCategory(str, Enum):
    """Categories a citizen can narrow the incident list to."""
    ALL = "all"
    WATER = "water"
    ELECTRICITY = "electricity"
    ROADS = "roads"


PRIORITY_TO_SEVERITY: Dict[IncidentPriority, int] = {
    IncidentPriority.LOW: 1,
    IncidentPriority.MEDIUM: 3,
    IncidentPriority.HIGH: 4,
    IncidentPriority.CRITICAL: 5,
}

SEVERITY_TO_PRIORITY: Dict[int, IncidentPriority] = {
    1: IncidentPriority.LOW,
    2: IncidentPriority.LOW,
    3: IncidentPriority.MEDIUM,
    4: IncidentPriority.HIGH,
    5: IncidentPriority.CRITICAL,
}


def _coerce_enum(enum_cls, value):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


def _coerce_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _coerce_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list, tuple, set)):
        return None
    return str(value)


class Incident(BaseModel):
    """
    A reported municipal service problem as held by the incident feed.

    Fields the store left empty stay None; the filter pipeline treats a
    missing field as a failed match rather than an error.
    """
    id: str
    type: Optional[IncidentType] = None
    severity: int = Field(default=1, ge=1, le=5)
    priority: Optional[IncidentPriority] = None
    status: Optional[IncidentStatus] = None
    title: str = ""
    description: str = ""
    jurisdiction_id: Optional[str] = None
    jurisdiction_name: Optional[str] = None
    province: Optional[str] = None
    coordinates: Optional[Coordinate] = None
    location_address: Optional[str] = None
    reporter_id: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    estimated_resolution_time: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Incident":
        priority = _coerce_enum(IncidentPriority, row.get("priority"))
        lat = _coerce_float(row.get("location_lat"))
        lng = _coerce_float(row.get("location_lng"))
        coordinates = None
        if lat is not None and lng is not None:
            coordinates = Coordinate(lat, lng)
        images = row.get("images") or []
        return cls(
            id=_coerce_text(row.get("id")) or "",
            type=_coerce_enum(IncidentType, row.get("incident_type")),
            severity=PRIORITY_TO_SEVERITY.get(priority, 1),
            priority=priority,
            status=_coerce_enum(IncidentStatus, row.get("status")),
            title=_coerce_text(row.get("title")) or "",
            description=_coerce_text(row.get("description")) or "",
            jurisdiction_id=_coerce_text(row.get("jurisdiction_id")),
            jurisdiction_name=_coerce_text(row.get("jurisdiction_name")),
            province=_coerce_text(row.get("province")),
            coordinates=coordinates,
            location_address=_coerce_text(row.get("location_address")),
            reporter_id=_coerce_text(row.get("reporter_id")),
            images=[str(image) for image in images] if isinstance(images, list) else [],
            estimated_resolution_time=parse_timestamp(row.get("estimated_resolution_time")),
            resolved_at=parse_timestamp(row.get("resolved_at")),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )


class IncidentCreate(BaseModel):
    """
    Incident submission from a citizen.
    The jurisdiction is taken from jurisdiction_id, else looked up by name,
    else resolved from the coordinates.
    """
    reporter_id: str = Field(..., min_length=1, description="Identity of the reporting citizen")
    incident_type: IncidentType
    severity: int = Field(..., ge=1, le=5, description="1 (minor) to 5 (emergency)")
    description: str = Field(..., min_length=1, max_length=2000)
    cause: Optional[str] = Field(None, max_length=200, description="Short cause used in the title")
    location: Optional[str] = Field(None, max_length=500, description="Free-text address")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    images: Optional[List[str]] = Field(None, description="Attachment references in object storage")
    jurisdiction_id: Optional[str] = None
    jurisdiction_name: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "reporter_id": "user-123",
                "incident_type": "water",
                "severity": 4,
                "description": "Burst pipe flooding the intersection.",
                "cause": "Burst pipe",
                "location": "Main Rd & 5th Ave, Rosebank",
                "latitude": -26.145,
                "longitude": 28.041,
            }
        }


class StatusUpdateRequest(BaseModel):
    """Staff triage update for a single incident."""
    status: IncidentStatus
    message: Optional[str] = Field(None, max_length=1000, description="Update shown to the reporter")
    eta: Optional[datetime] = Field(None, description="Estimated resolution time")
    updated_by: Optional[str] = Field(None, description="Staff member making the change")


class FilterState(BaseModel):
    """The citizen's current view filters."""
    selected_category: FilterCategory = FilterCategory.ALL
    resolved_jurisdiction: Optional[Jurisdiction] = None


class FeedStatus(str, Enum):
    LOADING = "loading"
    OK = "ok"
    STALE = "stale"


class FeedSnapshot(BaseModel):
    """
    Point-in-time view of the incident feed cache.
    A stale snapshot carries the last good incidents plus the read error.
    """
    status: FeedStatus
    incidents: List[Incident] = Field(default_factory=list)
    last_updated: Optional[datetime] = None
    error: Optional[str] = None
