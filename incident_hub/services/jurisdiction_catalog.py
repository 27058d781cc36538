"""
Jurisdiction Catalog - static reference data for South African municipalities.

Holds the metros, the district municipalities per province and the ordered
bounding boxes used by the location resolver.

DESIGN NOTES:
- The catalog is built once and injected into the resolver; nothing mutates it
- Box order is priority order: metro boxes first, provincial fallbacks after
- Boxes overlap; the first match wins, not the most precise one
- Every catalog is total: its last box is a catch-all or it names a default
"""

import json
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from incident_hub.core.settings import settings
from incident_hub.models.jurisdiction import BoundingBox, Jurisdiction, JurisdictionKind

logger = logging.getLogger(__name__)


METROS: List[Tuple[str, str]] = [
    ("Buffalo City", "Eastern Cape"),
    ("City of Cape Town", "Western Cape"),
    ("City of Johannesburg", "Gauteng"),
    ("City of Tshwane", "Gauteng"),
    ("Ekurhuleni", "Gauteng"),
    ("eThekwini", "KwaZulu-Natal"),
    ("Mangaung", "Free State"),
    ("Nelson Mandela Bay", "Eastern Cape"),
]

DISTRICTS_BY_PROVINCE: Dict[str, List[str]] = {
    "Eastern Cape": ["Alfred Nzo", "Amathole", "Chris Hani", "Joe Gqabi", "OR Tambo", "Sarah Baartman"],
    "Free State": ["Fezile Dabi", "Lejweleputswa", "Thabo Mofutsanyana", "Xhariep"],
    "Gauteng": ["Sedibeng", "West Rand"],
    "KwaZulu-Natal": [
        "Amajuba", "Harry Gwala", "iLembe", "King Cetshwayo", "Ugu",
        "uMgungundlovu", "uMkhanyakude", "uMzinyathi", "uThukela", "Zululand",
    ],
    "Limpopo": ["Capricorn", "Mopani", "Sekhukhune", "Vhembe", "Waterberg"],
    "Mpumalanga": ["Ehlanzeni", "Gert Sibande", "Nkangala"],
    "North West": ["Bojanala Platinum", "Dr Kenneth Kaunda", "Dr Ruth Segomotsi Mompati", "Ngaka Modiri Molema"],
    "Northern Cape": ["Frances Baard", "John Taolo Gaetsewe", "Namakwa", "Pixley ka Seme", "ZF Mgcawu"],
    "Western Cape": ["Cape Winelands", "Central Karoo", "Garden Route", "Overberg", "West Coast"],
}

# (min_lat, max_lat, min_lng, max_lng, name, kind, province) in priority order
BOX_TABLE: List[Tuple[float, float, float, float, str, str, str]] = [
    # Metropolitan areas (expanded extents)
    (-34.7, -33.2, 18.0, 19.5, "City of Cape Town", "metro", "Western Cape"),
    (-26.8, -25.8, 27.5, 28.8, "City of Johannesburg", "metro", "Gauteng"),
    (-30.5, -29.3, 30.3, 31.3, "eThekwini", "metro", "KwaZulu-Natal"),
    (-26.3, -25.2, 27.8, 28.8, "City of Tshwane", "metro", "Gauteng"),
    (-34.2, -33.7, 25.3, 25.9, "Nelson Mandela Bay", "metro", "Eastern Cape"),
    (-33.2, -32.7, 27.7, 28.2, "Buffalo City", "metro", "Eastern Cape"),
    (-29.4, -28.9, 26.0, 26.5, "Mangaung", "metro", "Free State"),
    # Provincial fallbacks
    (-35.0, -30.0, 16.0, 25.0, "Garden Route", "district", "Western Cape"),
    (-27.0, -24.0, 27.0, 31.0, "Waterberg", "district", "Limpopo"),
    (-32.0, -30.0, 29.0, 32.0, "King Cetshwayo", "district", "KwaZulu-Natal"),
    (-28.0, -25.0, 24.0, 28.0, "Dr Kenneth Kaunda", "district", "North West"),
    (-27.0, -25.0, 27.0, 29.0, "Ekurhuleni", "metro", "Gauteng"),
]

DEFAULT_JURISDICTION = Jurisdiction(name="Mangaung", kind=JurisdictionKind.METRO, province="Free State")


class JurisdictionCatalog:
    """
    Read-only jurisdiction reference data.

    Args:
        boxes: Bounding boxes in priority order
        default: Jurisdiction returned when no box matches; may be omitted
            only when the last box is a catch-all
        metros: Metropolitan municipalities
        districts: District municipality names keyed by province

    Raises:
        ValueError: If the catalog cannot resolve every coordinate
    """

    def __init__(
        self,
        boxes: Iterable[BoundingBox],
        default: Optional[Jurisdiction] = None,
        metros: Optional[Iterable[Jurisdiction]] = None,
        districts: Optional[Dict[str, List[str]]] = None,
    ):
        self._boxes: Tuple[BoundingBox, ...] = tuple(boxes)
        self._default = default
        self._metros: Tuple[Jurisdiction, ...] = tuple(metros or ())
        self._districts: Dict[str, Tuple[str, ...]] = {
            province: tuple(names) for province, names in (districts or {}).items()
        }

        if default is None and not (self._boxes and self._boxes[-1].is_catch_all()):
            raise ValueError(
                "Jurisdiction catalog is not total: provide a default jurisdiction "
                "or end the box list with a catch-all box"
            )

    @property
    def boxes(self) -> Tuple[BoundingBox, ...]:
        return self._boxes

    @property
    def default(self) -> Jurisdiction:
        if self._default is not None:
            return self._default
        return self._boxes[-1].jurisdiction

    def metros(self) -> List[Jurisdiction]:
        return list(self._metros)

    def districts_by_province(self) -> Dict[str, List[str]]:
        return {province: list(names) for province, names in self._districts.items()}

    def provinces(self) -> List[str]:
        names = set(self._districts)
        names.update(metro.province for metro in self._metros)
        names.update(box.jurisdiction.province for box in self._boxes)
        return sorted(names)

    def jurisdictions(self) -> List[Jurisdiction]:
        """Every known jurisdiction, metros first, without duplicates."""
        seen = set()
        result: List[Jurisdiction] = []
        candidates = list(self._metros)
        for province, names in self._districts.items():
            candidates.extend(
                Jurisdiction(name=name, kind=JurisdictionKind.DISTRICT, province=province)
                for name in names
            )
        candidates.extend(box.jurisdiction for box in self._boxes)
        candidates.append(self.default)
        for jurisdiction in candidates:
            if jurisdiction.name.lower() in seen:
                continue
            seen.add(jurisdiction.name.lower())
            result.append(jurisdiction)
        return result

    def find(self, name: Optional[str]) -> Optional[Jurisdiction]:
        """Case-insensitive lookup by jurisdiction name."""
        if not name or not name.strip():
            return None
        wanted = name.strip().lower()
        for jurisdiction in self.jurisdictions():
            if jurisdiction.name.lower() == wanted:
                return jurisdiction
        return None

    def to_dict(self) -> Dict:
        return {
            "default": self.default.model_dump(mode="json"),
            "metros": [metro.model_dump(mode="json") for metro in self._metros],
            "districts": self.districts_by_province(),
            "boxes": [box.model_dump(mode="json") for box in self._boxes],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "JurisdictionCatalog":
        """
        Build a catalog from the same shape to_dict() produces.

        Raises:
            ValueError: If the data is malformed or not total
        """
        try:
            boxes = [BoundingBox.model_validate(box) for box in data.get("boxes", [])]
            default = data.get("default")
            return cls(
                boxes=boxes,
                default=Jurisdiction.model_validate(default) if default else None,
                metros=[Jurisdiction.model_validate(metro) for metro in data.get("metros", [])],
                districts=data.get("districts") or {},
            )
        except (TypeError, AttributeError) as e:
            raise ValueError(f"Malformed jurisdiction catalog: {e}")


def default_catalog() -> JurisdictionCatalog:
    """The built-in South African catalog."""
    boxes = [
        BoundingBox(
            min_lat=min_lat,
            max_lat=max_lat,
            min_lng=min_lng,
            max_lng=max_lng,
            jurisdiction=Jurisdiction(name=name, kind=JurisdictionKind(kind), province=province),
        )
        for min_lat, max_lat, min_lng, max_lng, name, kind, province in BOX_TABLE
    ]
    metros = [
        Jurisdiction(name=name, kind=JurisdictionKind.METRO, province=province)
        for name, province in METROS
    ]
    return JurisdictionCatalog(
        boxes=boxes,
        default=DEFAULT_JURISDICTION,
        metros=metros,
        districts=DISTRICTS_BY_PROVINCE,
    )


def load_catalog(path: str) -> JurisdictionCatalog:
    """
    Load a catalog from a JSON file.

    Raises:
        ValueError: If the file is not valid JSON or not a valid catalog
        FileNotFoundError: If the file does not exist
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Jurisdiction catalog {path} is not valid JSON: {e}")
    catalog = JurisdictionCatalog.from_dict(data)
    logger.info(f"Loaded jurisdiction catalog from {path} ({len(catalog.boxes)} boxes)")
    return catalog


_catalog: Optional[JurisdictionCatalog] = None


def get_catalog() -> JurisdictionCatalog:
    """
    Get the process-wide catalog, loading it on first use.
    CATALOG_PATH overrides the built-in data.
    """
    global _catalog
    if _catalog is None:
        if settings.CATALOG_PATH:
            _catalog = load_catalog(settings.CATALOG_PATH)
        else:
            _catalog = default_catalog()
    return _catalog
