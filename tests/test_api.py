# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from swimrun.api import app
from swimrun.routers import sessions

client = TestClient(app)


@pytest.fixture(autouse=True)
def synthetic_classifier(classifier):
    sessions.set_classifier(classifier)
    yield
    sessions.set_classifier(None)


def _new_session(**body):
    response = client.post("/sessions", json=body)
    assert response.status_code == 201
    return response.json()["session_id"]


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_click_flow():
    sid = _new_session(classification="automatic")
    client.post(f"/sessions/{sid}/click", json={"lat": 0.0, "lon": 0.02})
    response = client.post(f"/sessions/{sid}/click", json={"lat": 0.0, "lon": 0.03})
    assert response.status_code == 200
    data = response.json()
    assert data["session_id"] == sid
    assert [w["type"] for w in data["waypoints"]] == ["start", "swim"]
    assert data["aggregates"]["swim_km"] == pytest.approx(1.11, abs=0.01)

    data = client.post(f"/sessions/{sid}/undo").json()
    assert len(data["waypoints"]) == 1
    assert data["aggregates"]["swim_km"] == 0

    data = client.post(f"/sessions/{sid}/clear").json()
    assert data["state"] == "empty"


def test_manual_mode_drag_and_marker_click():
    sid = _new_session(classification="manual", mode="run")
    for lon in (-0.08, -0.06, -0.04):
        client.post(f"/sessions/{sid}/click", json={"lat": 0.0, "lon": lon})

    data = client.post(f"/sessions/{sid}/drag", json={"index": 1, "lat": 0.01, "lon": -0.06}).json()
    assert data["aggregates"]["run_km"] == pytest.approx(data["aggregates"]["current_route_km"])

    data = client.post(f"/sessions/{sid}/marker-click", json={"index": 2}).json()
    assert data["editing_index"] == 2

    data = client.post(f"/sessions/{sid}/mode", json={"mode": "swim"}).json()
    assert data["mode"] == "swim"

    data = client.post(f"/sessions/{sid}/click", json={"lat": 0.0, "lon": -0.03}).json()
    assert data["waypoints"][2]["type"] == "swim"
    assert data["editing_index"] is None

    assert client.get(f"/sessions/{sid}").json() == data


def test_errors():
    sid = _new_session()
    response = client.post(f"/sessions/{sid}/click", json={"lat": 95.0, "lon": 0.0})
    assert response.status_code == 422

    response = client.post(f"/sessions/{sid}/drag", json={"index": 3, "lat": 0.0, "lon": 0.0})
    assert response.status_code == 409

    response = client.post(f"/sessions/{sid}/mode", json={"mode": "bike"})
    assert response.status_code == 422

    response = client.get("/sessions/does-not-exist")
    assert response.status_code == 404


def test_delete_session():
    sid = _new_session()
    assert client.delete(f"/sessions/{sid}").status_code == 204
    assert client.get(f"/sessions/{sid}").status_code == 404
    assert client.delete(f"/sessions/{sid}").status_code == 404


def test_idle_sessions_are_evicted(monkeypatch):
    stale = _new_session()
    fresh = _new_session()
    monkeypatch.setattr(sessions.settings, "session_ttl_s", 60)
    sessions._sessions[stale].last_used -= 3600

    assert sessions.evict_idle() == 1
    assert client.get(f"/sessions/{stale}").status_code == 404
    assert client.get(f"/sessions/{fresh}").status_code == 200


def test_requests_refresh_last_used(monkeypatch):
    sid = _new_session()
    monkeypatch.setattr(sessions.settings, "session_ttl_s", 60)
    sessions._sessions[sid].last_used -= 3600
    client.post(f"/sessions/{sid}/click", json={"lat": 0.0, "lon": 0.02})
    assert sessions.evict_idle() == 0


def test_classifier_built_once(monkeypatch, classifier):
    calls = []

    def _build():
        calls.append(1)
        return classifier

    sessions.set_classifier(None)
    monkeypatch.setattr(sessions, "build_classifier", _build)
    assert sessions.get_classifier() is classifier
    assert sessions.get_classifier() is classifier
    assert calls == [1]
