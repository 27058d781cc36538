import math

from incident_hub.models.jurisdiction import BoundingBox, Coordinate, Jurisdiction, JurisdictionKind
from incident_hub.services.jurisdiction_catalog import JurisdictionCatalog
from incident_hub.services.location_resolver import LocationResolver


def _jurisdiction(name, province="Testland", kind=JurisdictionKind.METRO):
    return Jurisdiction(name=name, kind=kind, province=province)


def _box(min_lat, max_lat, min_lng, max_lng, name):
    return BoundingBox(
        min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng,
        jurisdiction=_jurisdiction(name),
    )


def test_johannesburg_coordinate(resolver):
    jurisdiction = resolver.resolve(-26.2, 28.0)
    assert jurisdiction == Jurisdiction(name="City of Johannesburg", kind="metro", province="Gauteng")


def test_metro_coordinates(resolver):
    assert resolver.resolve(-33.92, 18.42).name == "City of Cape Town"
    assert resolver.resolve(-29.85, 31.02).name == "eThekwini"
    assert resolver.resolve(-25.75, 28.19).name == "City of Tshwane"
    assert resolver.resolve(-29.12, 26.21).name == "Mangaung"


def test_provincial_fallback_box(resolver):
    jurisdiction = resolver.resolve(-24.5, 29.0)
    assert jurisdiction.name == "Waterberg"
    assert jurisdiction.kind == JurisdictionKind.DISTRICT
    assert jurisdiction.province == "Limpopo"


def test_overlapping_metro_boxes_first_listed_wins(resolver):
    # Inside both the Johannesburg and Tshwane boxes
    assert resolver.resolve(-26.0, 28.0).name == "City of Johannesburg"


def test_unmatched_coordinate_resolves_to_default(resolver):
    jurisdiction = resolver.resolve(0, 0)
    assert jurisdiction is not None
    assert jurisdiction.name == "Mangaung"
    assert jurisdiction.province == "Free State"


def test_resolve_is_total_for_any_coordinate(resolver):
    coordinates = [
        (lat, lng)
        for lat in (-200, -90, -45, -26.2, 0, 45, 90, 200)
        for lng in (-400, -180, 0, 18.4, 28.0, 180, 400)
    ]
    coordinates.append((math.nan, math.nan))
    for lat, lng in coordinates:
        assert isinstance(resolver.resolve(lat, lng), Jurisdiction)


def test_priority_order_decides_between_overlapping_boxes():
    catalog = JurisdictionCatalog(
        boxes=[_box(0, 10, 0, 10, "First"), _box(-5, 5, -5, 5, "Second")],
        default=_jurisdiction("Fallback"),
    )
    resolver = LocationResolver(catalog)
    assert resolver.resolve(1, 1).name == "First"
    assert resolver.resolve(-1, -1).name == "Second"

    reversed_resolver = LocationResolver(JurisdictionCatalog(
        boxes=list(reversed(catalog.boxes)), default=catalog.default,
    ))
    assert reversed_resolver.resolve(1, 1).name == "Second"


def test_bounds_are_inclusive():
    resolver = LocationResolver(JurisdictionCatalog(
        boxes=[_box(-1, 1, -1, 1, "Edge")],
        default=_jurisdiction("Fallback"),
    ))
    assert resolver.resolve(-1, -1).name == "Edge"
    assert resolver.resolve(1, 1).name == "Edge"
    assert resolver.resolve(1.0001, 0).name == "Fallback"


def test_locate_without_coordinate_is_unresolved(resolver):
    assert resolver.locate(None) is None


def test_locate_flags_default_fallback(resolver):
    matched = resolver.locate(Coordinate(-26.2, 28.0))
    assert matched.is_default is False

    fallback = resolver.locate(Coordinate(51.5, -0.12))
    assert fallback.is_default is True
    assert fallback.jurisdiction.name == "Mangaung"


def test_catch_all_box_is_never_reported_as_default():
    catch_all = _box(-90, 90, -180, 180, "Everywhere")
    resolver = LocationResolver(JurisdictionCatalog(boxes=[_box(0, 1, 0, 1, "Small"), catch_all]))
    resolution = resolver.locate(Coordinate(40, 40))
    assert resolution.jurisdiction.name == "Everywhere"
    assert resolution.is_default is False
