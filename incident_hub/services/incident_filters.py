"""
Filter pipeline - narrows the incident feed for a citizen's view.

Two pure stages applied in a fixed order:
1. Jurisdiction: same municipality OR same province (widen-on-miss, so
   sparse local data still shows provincial incidents)
2. Category: exact incident type match

Both stages preserve input order and never mutate their input. An incident
missing a field simply fails that stage's predicate.
"""

from typing import Iterable, List, Optional, Union

from incident_hub.models.incident import FilterCategory, FilterState, Incident
from incident_hub.models.jurisdiction import Jurisdiction


def _value(field) -> Optional[str]:
    # Enum members compare by their string value
    return getattr(field, "value", field)


def filter_by_jurisdiction(
    incidents: Iterable[Incident],
    jurisdiction: Optional[Jurisdiction],
) -> List[Incident]:
    """Keep incidents in the jurisdiction or its province; None keeps all."""
    if jurisdiction is None:
        return list(incidents)
    return [
        incident for incident in incidents
        if (incident.jurisdiction_name is not None and incident.jurisdiction_name == jurisdiction.name)
        or (incident.province is not None and incident.province == jurisdiction.province)
    ]


def filter_by_category(
    incidents: Iterable[Incident],
    category: Union[FilterCategory, str],
) -> List[Incident]:
    """Keep incidents of the given type; 'all' keeps everything."""
    wanted = _value(category)
    if wanted == FilterCategory.ALL.value:
        return list(incidents)
    return [
        incident for incident in incidents
        if incident.type is not None and _value(incident.type) == wanted
    ]


def filter_incidents(
    incidents: Iterable[Incident],
    jurisdiction: Optional[Jurisdiction],
    category: Union[FilterCategory, str] = FilterCategory.ALL,
) -> List[Incident]:
    """
    Run both stages, jurisdiction first.

    Deterministic and idempotent: filtering an already-filtered list with
    the same arguments returns it unchanged.
    """
    return filter_by_category(filter_by_jurisdiction(incidents, jurisdiction), category)


def apply_filter_state(incidents: Iterable[Incident], state: FilterState) -> List[Incident]:
    return filter_incidents(incidents, state.resolved_jurisdiction, state.selected_category)
