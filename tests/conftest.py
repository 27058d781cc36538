import pytest
from fastapi.testclient import TestClient

from incident_hub.config.firebase import set_incident_store
from incident_hub.main import app
from incident_hub.services.jurisdiction_catalog import default_catalog
from incident_hub.services.location_resolver import LocationResolver
from incident_hub.services.voice import KeywordVoiceClassifier, get_voice_classifier
from incident_hub.stores.memory_store import MemoryIncidentStore


MUNICIPALITIES = {
    "m-cpt": {"name": "City of Cape Town", "province": "Western Cape", "type": "metro"},
    "m-jhb": {"name": "City of Johannesburg", "province": "Gauteng", "type": "metro"},
    "m-tsh": {"name": "City of Tshwane", "province": "Gauteng", "type": "metro"},
    "m-eth": {"name": "eThekwini", "province": "KwaZulu-Natal", "type": "metro"},
}

INCIDENTS = {
    "i1": {
        "incident_type": "water", "priority": "high", "status": "pending",
        "title": "Water Issue - Burst main", "description": "Burst main on Long Street",
        "jurisdiction_id": "m-cpt", "location_lat": -33.92, "location_lng": 18.42,
        "created_at": "2024-05-01T10:00:00Z",
    },
    "i2": {
        "incident_type": "roads", "priority": "low", "status": "in_progress",
        "title": "Roads Issue - Pothole", "description": "Pothole outside the school",
        "jurisdiction_id": "m-cpt", "created_at": "2024-05-02T10:00:00Z",
    },
    "i3": {
        "incident_type": "electricity", "priority": "critical", "status": "resolved",
        "title": "Electricity Issue - Transformer fire", "description": "Transformer on fire",
        "jurisdiction_id": "m-jhb", "location_lat": -26.2, "location_lng": 28.04,
        "created_at": "2024-05-03T08:00:00Z", "resolved_at": "2024-05-03T14:00:00Z",
    },
    "i4": {
        "incident_type": "water", "priority": "medium", "status": "pending",
        "title": "Water Issue - Low pressure", "description": "Low pressure in Hatfield",
        "jurisdiction_id": "m-tsh", "created_at": "2024-05-04T10:00:00Z",
    },
    "i5": {
        "incident_type": "waste", "priority": "medium", "status": "closed",
        "title": "Waste Issue - Missed collection", "description": "Bins not collected",
        "jurisdiction_id": "m-eth", "created_at": "2024-05-05T10:00:00Z",
    },
}


@pytest.fixture
def store():
    return MemoryIncidentStore(incidents=INCIDENTS, jurisdictions=MUNICIPALITIES)


@pytest.fixture
def resolver():
    return LocationResolver(default_catalog())


@pytest.fixture
def client(store):
    set_incident_store(store)
    app.dependency_overrides[get_voice_classifier] = lambda: KeywordVoiceClassifier()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    set_incident_store(None)
