"""
Tests for the FastAPI backend.

These run the app in-process with FastAPI's TestClient; the routing
provider is replaced through a dependency override.
"""

import inspect
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

import api.main
from api.main import app, routing_service, walking_routes
from services.routing_service import RoutingService

ROUTE_PAYLOAD = {
    'features': [
        {
            'geometry': {'type': 'LineString', 'coordinates': [[13.405, 52.52], [13.406, 52.5204]]},
            'properties': {'summary': {'distance': 61.2, 'duration': 44.1}},
        }
    ],
}


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _payload(track, **parameters):
    body = {'fixes': [fix.to_dict() for fix in track]}
    if parameters:
        body['parameters'] = parameters
    return body


def _csv_bytes(track):
    rows = ["latitude,longitude,timestamp"]
    rows += [f"{fix.latitude!r},{fix.longitude!r},{fix.timestamp}" for fix in track]
    return ("\n".join(rows) + "\n").encode('utf-8')


class TestInfoEndpoints:
    """Tests for the informational endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "POST /api/segment-track" in response.json()['endpoints']

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()['status'] == "healthy"

    def test_config(self, client):
        data = client.get("/api/config").json()

        assert data['defaults']['walking_speed_threshold'] == pytest.approx(1.9444, abs=1e-4)
        assert data['defaults']['record_delay'] == 200
        assert data['ui']['walking_color'] == "#3385ff"
        assert 'api_key' not in data['routing']


class TestSegmentFixes:
    """Tests for POST /api/segment-fixes."""

    def test_segments_returned(self, client, drive_with_walk_legs):
        response = client.post("/api/segment-fixes", json=_payload(drive_with_walk_legs))

        assert response.status_code == 200
        data = response.json()
        assert [s['start_idx'] for s in data['walking_segments']] == [0, 17]
        assert [s['start_idx'] for s in data['faster_segments']] == [3]
        assert len(data['walking_segments'][0]['coordinates']) == 3
        assert data['track_summary']['fix_count'] == 20

    def test_parameter_override(self, client, walking_track):
        response = client.post(
            "/api/segment-fixes",
            json=_payload(walking_track, min_segment_length=1000.0)
        )

        assert response.status_code == 200
        data = response.json()
        assert data['walking_segments'] == []
        assert data['parameters']['min_segment_length'] == 1000.0

    def test_empty_fix_list(self, client):
        response = client.post("/api/segment-fixes", json={'fixes': []})
        assert response.status_code == 400

    def test_decreasing_timestamps(self, client, walking_track):
        response = client.post("/api/segment-fixes", json=_payload(walking_track[::-1]))
        assert response.status_code == 400
        assert "non-decreasing" in response.json()['detail']

    def test_invalid_parameters(self, client, walking_track):
        response = client.post(
            "/api/segment-fixes",
            json=_payload(walking_track, stationary_radius=50.0, max_stationary_radius=25.0)
        )
        assert response.status_code == 400

    def test_malformed_body(self, client):
        response = client.post("/api/segment-fixes", json={'fixes': [{'latitude': 1.0}]})
        assert response.status_code == 422


class TestSegmentTrack:
    """Tests for POST /api/segment-track."""

    def test_csv_upload(self, client, mixed_day):
        response = client.post(
            "/api/segment-track",
            files={'file': ("day.csv", _csv_bytes(mixed_day), "text/csv")}
        )

        assert response.status_code == 200
        data = response.json()
        assert [(s['start_idx'], s['end_idx']) for s in data['walking_segments']] == [(0, 24)]
        assert [(s['start_idx'], s['end_idx']) for s in data['faster_segments']] == [(36, 56)]
        assert data['stops'][0]['anchor_idx'] == 36
        assert data['track_summary']['filename'] == "day.csv"

    def test_query_parameters(self, client, walking_track):
        response = client.post(
            "/api/segment-track",
            files={'file': ("walk.csv", _csv_bytes(walking_track), "text/csv")},
            params={'min_segment_length': 1000}
        )

        assert response.status_code == 200
        assert response.json()['walking_segments'] == []

    def test_wrong_file_type(self, client):
        response = client.post(
            "/api/segment-track",
            files={'file': ("notes.txt", b"hello", "text/plain")}
        )
        assert response.status_code == 400

    def test_empty_file(self, client):
        response = client.post(
            "/api/segment-track",
            files={'file': ("empty.gpx", b"   ", "application/gpx+xml")}
        )
        assert response.status_code == 400

    def test_invalid_gpx(self, client):
        response = client.post(
            "/api/segment-track",
            files={'file': ("broken.gpx", b"<gpx><trk>", "application/gpx+xml")}
        )
        assert response.status_code == 400

    def test_text_timestamps_rejected(self, client):
        """ISO dates in the timestamp column are a client error."""
        content = b"latitude,longitude,timestamp\n52.52,13.405,2024-01-01T10:00:00\n52.5201,13.405,2024-01-01T10:00:20\n"
        response = client.post(
            "/api/segment-track",
            files={'file': ("day.csv", content, "text/csv")}
        )

        assert response.status_code == 400
        assert "non-numeric" in response.json()['detail']

    def test_fractional_timestamps_rejected(self, client):
        content = b"latitude,longitude,timestamp\n52.52,13.405,1000.5\n52.5201,13.405,2000.25\n"
        response = client.post(
            "/api/segment-track",
            files={'file': ("day.csv", content, "text/csv")}
        )

        assert response.status_code == 400
        assert "whole milliseconds" in response.json()['detail']


class TestWalkingRoutes:
    """Tests for POST /api/walking-routes."""

    def test_unconfigured_routing(self, client, walking_track):
        app.dependency_overrides[routing_service] = lambda: RoutingService(api_key="")

        response = client.post("/api/walking-routes", json=_payload(walking_track))
        assert response.status_code == 503

    def test_routes_for_walking_segments(self, client, drive_with_walk_legs):
        session = MagicMock()
        session.get.return_value.json.return_value = ROUTE_PAYLOAD
        app.dependency_overrides[routing_service] = lambda: RoutingService(api_key="key", session=session)

        response = client.post("/api/walking-routes", json=_payload(drive_with_walk_legs))

        assert response.status_code == 200
        data = response.json()
        assert len(data['walking_segments']) == 2
        assert len(data['routes']) == 2
        assert data['routes'][0]['distance'] == 61.2

    def test_failed_lookup_gives_null_route(self, client, walking_track):
        session = MagicMock()
        session.get.return_value.json.return_value = {'features': []}
        app.dependency_overrides[routing_service] = lambda: RoutingService(api_key="key", session=session)

        response = client.post("/api/walking-routes", json=_payload(walking_track))

        assert response.status_code == 200
        assert response.json()['routes'] == [None]

    def test_session_closed_after_request(self, client, walking_track, monkeypatch):
        session = MagicMock()
        session.get.return_value.json.return_value = ROUTE_PAYLOAD
        monkeypatch.setattr(api.main, 'get_routing_service', lambda: RoutingService(api_key="key", session=session))

        response = client.post("/api/walking-routes", json=_payload(walking_track))

        assert response.status_code == 200
        session.close.assert_called_once()

    def test_runs_off_the_event_loop(self):
        """Blocking route lookups must not run as a coroutine."""
        assert not inspect.iscoroutinefunction(walking_routes)
