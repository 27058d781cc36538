"""
Jurisdiction endpoints - catalog listing and coordinate resolution.
"""

from typing import Dict, List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from incident_hub.models.jurisdiction import Coordinate, Jurisdiction, Resolution
from incident_hub.services.jurisdiction_catalog import JurisdictionCatalog, get_catalog
from incident_hub.services.location_resolver import LocationResolver, get_location_resolver


class ProvinceDistricts(BaseModel):
    province: str
    districts: List[str]


class CatalogResponse(BaseModel):
    default: Jurisdiction
    metros: List[Jurisdiction]
    districts: List[ProvinceDistricts]


router = APIRouter(prefix="/jurisdictions", tags=["Jurisdictions"])


@router.get("", response_model=CatalogResponse)
async def list_jurisdictions(catalog: JurisdictionCatalog = Depends(get_catalog)):
    """Metros and district municipalities grouped by province."""
    districts: Dict[str, List[str]] = catalog.districts_by_province()
    return CatalogResponse(
        default=catalog.default,
        metros=catalog.metros(),
        districts=[
            ProvinceDistricts(province=province, districts=names)
            for province, names in sorted(districts.items())
        ],
    )


@router.get("/resolve", response_model=Resolution)
async def resolve_jurisdiction(
    lat: float = Query(..., description="Latitude in decimal degrees"),
    lng: float = Query(..., description="Longitude in decimal degrees"),
    resolver: LocationResolver = Depends(get_location_resolver),
):
    """
    Resolve a coordinate to a jurisdiction.
    is_default=true means no box matched and the catalog default was used.
    """
    return resolver.locate(Coordinate(lat, lng))
