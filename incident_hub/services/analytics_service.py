"""
Analytics Service - summary figures for the staff dashboard.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from incident_hub.models.incident import Incident, IncidentStatus


class CategoryCount(BaseModel):
    name: str
    value: int


class IncidentAnalytics(BaseModel):
    total_incidents: int = 0
    pending_incidents: int = 0
    resolved_incidents: int = 0
    avg_resolution_hours: float = Field(default=0.0, description="Mean created->resolved time, 0.1h precision")
    incidents_by_type: List[CategoryCount] = Field(default_factory=list)
    priority_distribution: List[CategoryCount] = Field(default_factory=list)


def _counts(values: Iterable[Optional[str]]) -> List[CategoryCount]:
    counter = Counter(value for value in values if value is not None)
    return [CategoryCount(name=name, value=count) for name, count in counter.most_common()]


def summarize_incidents(incidents: List[Incident]) -> IncidentAnalytics:
    resolution_hours = [
        (incident.resolved_at - incident.created_at).total_seconds() / 3600
        for incident in incidents
        if incident.resolved_at is not None and incident.created_at is not None
    ]
    avg_hours = sum(resolution_hours) / len(resolution_hours) if resolution_hours else 0.0

    return IncidentAnalytics(
        total_incidents=len(incidents),
        pending_incidents=sum(1 for i in incidents if i.status == IncidentStatus.PENDING),
        resolved_incidents=sum(1 for i in incidents if i.status == IncidentStatus.RESOLVED),
        avg_resolution_hours=round(avg_hours, 1),
        incidents_by_type=_counts(i.type.value if i.type else None for i in incidents),
        priority_distribution=_counts(i.priority.value if i.priority else None for i in incidents),
    )


def counts_by_jurisdiction(incidents: List[Incident]) -> Dict[str, int]:
    """Open (pending or in progress) incidents per jurisdiction name."""
    open_statuses = {IncidentStatus.PENDING, IncidentStatus.IN_PROGRESS}
    counter = Counter(
        incident.jurisdiction_name
        for incident in incidents
        if incident.jurisdiction_name and incident.status in open_statuses
    )
    return dict(counter)
