"""
Location Resolver - maps a coordinate to the jurisdiction it falls in.

Coarse containment only: bounding boxes tested in catalog priority order,
not point-in-polygon against real municipal boundaries.
"""

import logging
from typing import Optional

from incident_hub.models.jurisdiction import Coordinate, Jurisdiction, Resolution
from incident_hub.services.jurisdiction_catalog import JurisdictionCatalog, get_catalog

logger = logging.getLogger(__name__)


class LocationResolver:
    """Pure lookup over an injected, read-only catalog."""

    def __init__(self, catalog: JurisdictionCatalog):
        self.catalog = catalog

    def resolve(self, latitude: float, longitude: float) -> Jurisdiction:
        """
        Return the jurisdiction of the first box containing the point,
        or the catalog default when none does. Never raises, never None.
        """
        return self._match(latitude, longitude).jurisdiction

    def locate(self, coordinate: Optional[Coordinate]) -> Optional[Resolution]:
        """
        Resolve an optional coordinate.

        An unavailable coordinate (permission denied, no fix) stays
        unresolved: None is returned instead of the default so that
        downstream filtering does not narrow to the wrong area.
        """
        if coordinate is None:
            return None
        latitude, longitude = coordinate
        if latitude is None or longitude is None:
            return None
        return self._match(latitude, longitude)

    def _match(self, latitude: float, longitude: float) -> Resolution:
        for box in self.catalog.boxes:
            if box.contains(latitude, longitude):
                return Resolution(jurisdiction=box.jurisdiction)

        default = self.catalog.default
        logger.info(
            f"No jurisdiction box contains ({latitude}, {longitude}); "
            f"falling back to default '{default.name}'"
        )
        return Resolution(jurisdiction=default, is_default=True)


_resolver: Optional[LocationResolver] = None


def get_location_resolver() -> LocationResolver:
    """Get the process-wide resolver bound to the configured catalog."""
    global _resolver
    if _resolver is None:
        _resolver = LocationResolver(get_catalog())
    return _resolver
