"""
Pydantic models for jurisdictions and their bounding boxes.

Jurisdictions are immutable reference data: loaded once, never mutated.
"""

from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field


class Coordinate(NamedTuple):
    """A (latitude, longitude) pair in decimal degrees (WGS-84)."""
    latitude: float
    longitude: float


class JurisdictionKind(str, Enum):
    METRO = "metro"
    DISTRICT = "district"
    LOCAL = "local"


class Jurisdiction(BaseModel):
    """An administrative area used to scope incidents geographically."""
    name: str = Field(..., description="Municipality name, e.g. 'City of Cape Town'")
    kind: JurisdictionKind = Field(..., description="metro, district or local municipality")
    province: str = Field(..., description="Province the municipality belongs to")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "name": "City of Johannesburg",
                "kind": "metro",
                "province": "Gauteng",
            }
        }


class BoundingBox(BaseModel):
    """
    Axis-aligned lat/lng rectangle approximating a jurisdiction's extent.
    Bounds are inclusive on every side.
    """
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float
    jurisdiction: Jurisdiction

    class Config:
        frozen = True

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.min_lat <= latitude <= self.max_lat
            and self.min_lng <= longitude <= self.max_lng
        )

    def is_catch_all(self) -> bool:
        """True when the box covers the whole globe."""
        return (
            self.min_lat <= -90 and self.max_lat >= 90
            and self.min_lng <= -180 and self.max_lng >= 180
        )


class Resolution(BaseModel):
    """Outcome of resolving a coordinate against the catalog."""
    jurisdiction: Jurisdiction
    is_default: bool = Field(
        default=False,
        description="True when no bounding box matched and the catalog default was used",
    )
