"""
API smoke tests against the in-memory store.
"""

from incident_hub.services.voice import OpenAIVoiceClassifier, get_voice_classifier


def ids(payload):
    return [incident["id"] for incident in payload["incidents"]]


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_feed_health(client):
    body = client.get("/health/feed").json()
    assert body["status"] == "ok"
    assert body["incident_count"] == 5
    assert body["error"] is None


def test_resolve_johannesburg(client):
    response = client.get("/jurisdictions/resolve", params={"lat": -26.2, "lng": 28.0})
    assert response.status_code == 200
    assert response.json() == {
        "jurisdiction": {"name": "City of Johannesburg", "kind": "metro", "province": "Gauteng"},
        "is_default": False,
    }


def test_resolve_outside_every_box_falls_back_to_default(client):
    body = client.get("/jurisdictions/resolve", params={"lat": 0, "lng": 0}).json()
    assert body["jurisdiction"]["name"] == "Mangaung"
    assert body["is_default"] is True


def test_resolve_requires_both_coordinates(client):
    assert client.get("/jurisdictions/resolve", params={"lat": -26.2}).status_code == 422


def test_list_jurisdictions(client):
    body = client.get("/jurisdictions").json()
    assert body["default"]["name"] == "Mangaung"
    assert len(body["metros"]) == 8
    provinces = [group["province"] for group in body["districts"]]
    assert provinces == sorted(provinces)
    assert len(provinces) == 9


def test_unfiltered_feed_is_newest_first(client):
    body = client.get("/incidents").json()
    assert body["feed_status"] == "ok"
    assert body["jurisdiction"] is None
    assert body["count"] == 5
    assert ids(body) == ["i5", "i4", "i3", "i2", "i1"]


def test_feed_filtered_by_coordinates_and_category(client):
    body = client.get("/incidents", params={"lat": -33.92, "lng": 18.42, "category": "water"}).json()
    assert body["jurisdiction"]["name"] == "City of Cape Town"
    assert body["is_default_jurisdiction"] is False
    assert ids(body) == ["i1"]


def test_feed_by_jurisdiction_name_includes_same_province(client):
    body = client.get("/incidents", params={"jurisdiction": "city of tshwane"}).json()
    assert ids(body) == ["i4", "i3"]


def test_feed_unknown_jurisdiction(client):
    response = client.get("/incidents", params={"jurisdiction": "Atlantis"})
    assert response.status_code == 404


def test_feed_rejects_unknown_category(client):
    response = client.get("/incidents", params={"category": "waste"})
    assert response.status_code == 422


def test_submit_incident_then_see_it_in_feed(client):
    response = client.post("/incidents", json={
        "reporter_id": "citizen-9",
        "incident_type": "water",
        "severity": 5,
        "description": "Water gushing out of the road",
        "cause": "Burst pipe",
        "latitude": -26.2,
        "longitude": 28.0,
    })
    assert response.status_code == 201
    created = response.json()
    assert created["priority"] == "critical"
    assert created["status"] == "pending"
    assert created["title"] == "Water Issue - Burst pipe"
    assert created["jurisdiction_id"] == "m-jhb"

    refreshed = client.post("/incidents/refresh").json()
    assert refreshed["status"] == "ok"

    body = client.get("/incidents", params={"jurisdiction": "City of Johannesburg", "category": "water"}).json()
    assert created["id"] in ids(body)


def test_submit_incident_outside_known_jurisdictions(client):
    response = client.post("/incidents", json={
        "reporter_id": "citizen-9",
        "incident_type": "roads",
        "severity": 2,
        "description": "Pothole",
        "latitude": 0.0,
        "longitude": 0.0,
    })
    assert response.status_code == 422


def test_submit_incident_validation(client):
    response = client.post("/incidents", json={
        "reporter_id": "citizen-9",
        "incident_type": "water",
        "severity": 9,
        "description": "Leak",
    })
    assert response.status_code == 422


def test_admin_resolves_incident(client, store):
    response = client.patch("/admin/incidents/i1/status", json={
        "status": "resolved",
        "message": "Main repaired",
        "updated_by": "staff-1",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "resolved"
    assert body["resolved_at"] is not None
    assert [u["message"] for u in store.incident_updates("i1")] == ["Main repaired"]


def test_admin_status_for_missing_incident(client):
    response = client.patch("/admin/incidents/nope/status", json={"status": "closed"})
    assert response.status_code == 404


def test_admin_analytics(client):
    body = client.get("/admin/analytics").json()
    assert body["total_incidents"] == 5
    assert body["pending_incidents"] == 2
    assert body["resolved_incidents"] == 1
    assert body["avg_resolution_hours"] == 6.0
    assert body["incidents_by_type"][0] == {"name": "water", "value": 2}


def test_admin_open_incidents_by_jurisdiction(client):
    body = client.get("/admin/analytics/jurisdictions").json()
    assert body == {"City of Cape Town": 2, "City of Tshwane": 1}


def test_voice_report(client):
    response = client.post("/voice-reports/process", json={
        "transcript": "There is a burst pipe on Main Road. Water everywhere.",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "water"
    assert body["title"] == "There is a burst pipe on Main Road"


def test_voice_report_needs_transcript(client):
    response = client.post("/voice-reports/process", json={"transcript": "   "})
    assert response.status_code == 400


def test_feed_by_store_only_jurisdiction_name(client, store):
    store.add_jurisdiction("m-stb", {"name": "Stellenbosch", "province": "Western Cape", "type": "local"})
    store.insert_incident({
        "id": "i6", "incident_type": "water", "status": "pending",
        "jurisdiction_id": "m-stb", "created_at": "2024-05-06T10:00:00Z",
    })
    client.post("/incidents/refresh")

    body = client.get("/incidents", params={"jurisdiction": "stellenbosch"}).json()
    assert body["jurisdiction"] == {"name": "Stellenbosch", "kind": "local", "province": "Western Cape"}
    assert ids(body) == ["i6", "i2", "i1"]


def test_voice_report_with_unreadable_ai_response(client, monkeypatch):
    class NotJson:
        status_code = 200

        def json(self):
            raise ValueError("Expecting value")

    monkeypatch.setattr(
        "incident_hub.services.voice.openai_provider.requests.post",
        lambda *args, **kwargs: NotJson(),
    )
    app = client.app
    app.dependency_overrides[get_voice_classifier] = lambda: OpenAIVoiceClassifier(api_key="sk-test")

    response = client.post("/voice-reports/process", json={"transcript": "Burst pipe on Main Road"})
    assert response.status_code == 502
    assert "Invalid response format from AI" in response.json()["detail"]
