"""
API tests using FastAPI's TestClient.

Startup events are not run (no `with TestClient(...)`), so Firestore is
never initialized; the report service's get_db is patched instead.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services import report_service
from tests.conftest import FakeFirestore, make_report

SERVICE = "app.services.geocoding.service"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def reports_db():
    db = FakeFirestore({"reports": {
        "r1": make_report(priority=3),
        "r2": make_report(address="123 Main St", type="debris", severity="critical"),
    }})
    with patch.object(report_service, "get_db", return_value=db):
        yield db


class TestRoot:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "running"
        assert body["service"] == "Road Hazard Watch"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["geocoding_provider"] in {"mapbox", "nominatim", "google"}

    def test_unknown_route_uses_error_envelope(self, client):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.json()["success"] is False
        assert resp.json()["error"]["statusCode"] == 404


class TestForwardGeocode:
    def test_missing_address(self, client):
        resp = client.post("/api/geocode/forward", json={})
        assert resp.status_code == 400
        assert resp.json() == {
            "success": False,
            "error": {"message": "Address is required", "statusCode": 400},
        }

    def test_found(self, client, nyc_geocode_result):
        result = dict(nyc_geocode_result, coordinates={"latitude": 40.7128, "longitude": -74.006})
        with patch(f"{SERVICE}.forward_geocode", AsyncMock(return_value=result)):
            resp = client.post("/api/geocode/forward", json={"address": "123 Main St"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["coordinates"]["latitude"] == 40.7128
        assert body["message"] == "Address geocoded successfully"

    def test_not_found(self, client):
        with patch(f"{SERVICE}.forward_geocode", AsyncMock(return_value=None)):
            resp = client.post("/api/geocode/forward", json={"address": "Atlantis"})
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Address not found"

    def test_service_error(self, client):
        with patch(f"{SERVICE}.forward_geocode", AsyncMock(side_effect=RuntimeError("boom"))):
            resp = client.post("/api/geocode/forward", json={"address": "x"})
        assert resp.status_code == 500
        assert resp.json()["error"]["message"] == "Geocoding service error"


class TestReverseGeocode:
    @pytest.mark.parametrize("body", [{}, {"latitude": 40.7}, {"longitude": -74.0}])
    def test_missing_coordinates(self, client, body):
        resp = client.post("/api/geocode/reverse", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Latitude and longitude are required"

    def test_zero_coordinates_are_accepted(self, client, nyc_geocode_result):
        with patch(f"{SERVICE}.reverse_geocode", AsyncMock(return_value=nyc_geocode_result)) as reverse:
            resp = client.post("/api/geocode/reverse", json={"latitude": 0.0, "longitude": 0.0})
        assert resp.status_code == 200
        reverse.assert_awaited_once_with(0.0, 0.0)

    def test_found(self, client, nyc_geocode_result):
        with patch(f"{SERVICE}.reverse_geocode", AsyncMock(return_value=nyc_geocode_result)):
            resp = client.post("/api/geocode/reverse", json={"latitude": 40.7128, "longitude": -74.006})
        assert resp.status_code == 200
        assert resp.json()["data"]["zipCode"] == "10001"

    def test_not_found(self, client):
        with patch(f"{SERVICE}.reverse_geocode", AsyncMock(return_value=None)):
            resp = client.post("/api/geocode/reverse", json={"latitude": 1.5, "longitude": 2.5})
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Location not found"


class TestBatchReverseGeocode:
    @pytest.mark.parametrize("body", [{}, {"coordinates": []}, {"coordinates": "1.0,2.0"}])
    def test_requires_array(self, client, body):
        resp = client.post("/api/geocode/batch-reverse", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Coordinates array is required"

    def test_rejects_more_than_fifty(self, client):
        coordinates = [{"latitude": 1.0, "longitude": 1.0}] * 51
        resp = client.post("/api/geocode/batch-reverse", json={"coordinates": coordinates})
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Maximum 50 coordinates allowed per request"

    def test_batch(self, client, nyc_geocode_result):
        coordinates = [{"latitude": 1.0, "longitude": 1.0}, {"latitude": 2.0, "longitude": 2.0}]
        with patch(f"{SERVICE}.reverse_geocode", AsyncMock(side_effect=[nyc_geocode_result, None])):
            resp = client.post("/api/geocode/batch-reverse", json={"coordinates": coordinates})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data[0] == {"coordinates": coordinates[0], "address": nyc_geocode_result}
        assert data[1] == {"coordinates": coordinates[1], "address": None}


class TestMapData:
    def test_map_data(self, client, reports_db):
        with patch(f"{SERVICE}.reverse_geocode", AsyncMock(return_value=None)):
            resp = client.get("/api/map/data", params={"lat": 40.7128, "lng": -74.006})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [r["id"] for r in data["reports"]] == ["r1", "r2"]
        assert data["reports"][0]["location"]["address"] == "📍 Location (40.712800, -74.006000)"
        assert data["reports"][1]["location"]["address"] == "123 Main St"
        assert data["stats"]["total"] == 2
        assert data["stats"]["critical"] == 1

    def test_map_data_type_filter(self, client, reports_db):
        resp = client.get("/api/map/data", params={"type": "debris"})
        assert [r["id"] for r in resp.json()["data"]["reports"]] == ["r2"]

    def test_invalid_severity_is_rejected(self, client, reports_db):
        resp = client.get("/api/map/data", params={"severity": "apocalyptic"})
        assert resp.status_code == 422
        assert resp.json()["success"] is False


class TestReports:
    def test_list_reports(self, client, reports_db, nyc_geocode_result):
        with patch(f"{SERVICE}.reverse_geocode", AsyncMock(return_value=nyc_geocode_result)):
            resp = client.get("/api/reports", params={"limit": 1})

        body = resp.json()
        assert body["data"]["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
        assert body["data"]["reports"][0]["location"]["city"] == "NYC"

    def test_get_report(self, client, reports_db):
        resp = client.get("/api/reports/r2")
        assert resp.status_code == 200
        assert resp.json()["data"]["type"] == "debris"

    def test_get_missing_report(self, client, reports_db):
        resp = client.get("/api/reports/missing")
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Report not found"


@pytest.fixture
def listing_db():
    db = FakeFirestore({"reports": {
        "jan": make_report(
            address="12 Harbor Rd", description="Cracked asphalt",
            type="crack", priority=9, createdAt="2024-01-05T09:00:00Z",
        ),
        "feb": make_report(
            address="7 Mill Lane", description="Deep pothole by the bakery",
            priority=1, createdAt="2024-02-10T09:00:00Z",
        ),
        "mar": make_report(
            address="Ring Road", description="Fallen branches",
            type="debris", priority=4, createdAt="2024-03-15T09:00:00Z",
        ),
    }})
    db.collections_data["reports"]["mar"]["location"]["city"] = "Millbrook"
    with patch.object(report_service, "get_db", return_value=db):
        yield db


def listed_ids(resp):
    assert resp.status_code == 200
    return [r["id"] for r in resp.json()["data"]["reports"]]


class TestReportListing:
    def test_newest_first_by_default(self, client, listing_db):
        assert listed_ids(client.get("/api/reports")) == ["mar", "feb", "jan"]

    def test_sort_and_order(self, client, listing_db):
        resp = client.get("/api/reports", params={"sort": "priority", "order": "asc"})
        assert listed_ids(resp) == ["feb", "mar", "jan"]

    def test_unknown_sort_field_is_rejected(self, client, listing_db):
        assert client.get("/api/reports", params={"sort": "reporter"}).status_code == 422

    def test_second_page(self, client, listing_db):
        resp = client.get("/api/reports", params={"page": 2, "limit": 2})

        assert listed_ids(resp) == ["jan"]
        assert resp.json()["data"]["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}

    def test_page_past_the_end_is_empty(self, client, listing_db):
        resp = client.get("/api/reports", params={"page": 5})
        assert listed_ids(resp) == []
        assert resp.json()["data"]["pagination"]["total"] == 3

    def test_text_search_is_case_insensitive(self, client, listing_db):
        assert listed_ids(client.get("/api/reports", params={"q": "POTHOLE"})) == ["feb"]

    def test_text_search_covers_address_and_city(self, client, listing_db):
        # "mill" is in feb's address and mar's city
        assert listed_ids(client.get("/api/reports", params={"q": "mill"})) == ["mar", "feb"]

    def test_text_search_treats_input_literally(self, client, listing_db):
        assert listed_ids(client.get("/api/reports", params={"q": "(.*"})) == []

    def test_date_from(self, client, listing_db):
        resp = client.get("/api/reports", params={"dateFrom": "2024-02-01T00:00:00Z"})
        assert listed_ids(resp) == ["mar", "feb"]

    def test_date_range(self, client, listing_db):
        resp = client.get(
            "/api/reports",
            params={"dateFrom": "2024-01-01T00:00:00Z", "dateTo": "2024-02-28T00:00:00Z"},
        )
        assert listed_ids(resp) == ["feb", "jan"]
        assert resp.json()["data"]["pagination"]["total"] == 2

    def test_filters_combine(self, client, listing_db):
        resp = client.get("/api/reports", params={"type": "debris", "q": "branches"})
        assert listed_ids(resp) == ["mar"]


class TestNearbyAndStats:
    @pytest.mark.parametrize("params", [{}, {"lat": 40.7}, {"lng": -74.0}])
    def test_nearby_requires_coordinates(self, client, reports_db, params):
        resp = client.get("/api/map/nearby", params=params)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Latitude and longitude are required"

    def test_nearby(self, client, reports_db):
        with patch(f"{SERVICE}.reverse_geocode", AsyncMock(return_value=None)):
            resp = client.get("/api/map/nearby", params={"lat": 40.7128, "lng": -74.006, "limit": 1})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [r["id"] for r in data] == ["r1"]
        assert data[0]["location"]["address"] == "📍 Location (40.712800, -74.006000)"

    def test_nearby_excludes_far_reports(self, client, reports_db):
        resp = client.get("/api/map/nearby", params={"lat": -33.86, "lng": 151.2})
        assert resp.json()["data"] == []

    def test_stats(self, client, reports_db):
        data = client.get("/api/map/stats").json()["data"]

        assert data["stats"]["totalReports"] == 2
        assert data["stats"]["activeReports"] == 2
        assert data["stats"]["criticalReports"] == 1
        assert {"_id": "pothole", "count": 1} in data["reportsByType"]
        assert data["reportsByStatus"] == [{"_id": "pending", "count": 2}]

    def test_stats_for_empty_area(self, client, reports_db):
        data = client.get("/api/map/stats", params={"lat": -33.86, "lng": 151.2}).json()["data"]

        assert data["stats"]["totalReports"] == 0
        assert data["stats"]["avgResolutionTime"] == 0
        assert data["reportsByType"] == []


class TestHeatmapAndClusters:
    def test_heatmap(self, client, reports_db):
        data = client.get("/api/map/heatmap").json()["data"]

        assert data == [{
            "lat": 40.713,
            "lng": -74.006,
            "count": 2,
            "avgPriority": 1.5,
            "criticalCount": 1,
            "highCount": 0,
            "weight": 5,
        }]

    def test_heatmap_type_filter(self, client, reports_db):
        data = client.get("/api/map/heatmap", params={"type": "debris"}).json()["data"]
        assert data[0]["count"] == 1
        assert data[0]["weight"] == 4

    def test_clusters_carry_normalized_reports(self, client, reports_db, nyc_geocode_result):
        with patch(f"{SERVICE}.reverse_geocode", AsyncMock(return_value=nyc_geocode_result)):
            data = client.get("/api/map/clusters").json()["data"]

        assert len(data) == 1
        assert data[0]["count"] == 2
        assert [r["id"] for r in data[0]["reports"]] == ["r1", "r2"]
        assert data[0]["reports"][0]["location"]["address"] == "123 Main St"

    def test_clusters_outside_area(self, client, reports_db):
        resp = client.get("/api/map/clusters", params={"lat": -33.86, "lng": 151.2})
        assert resp.json()["data"] == []
