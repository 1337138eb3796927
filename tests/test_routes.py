
import pytest
from fastapi.testclient import TestClient
from api.main import app
import api.routes as routes
from zenith.report import build_report


@pytest.fixture
def client(monkeypatch):
    # no external advice call from tests
    monkeypatch.setattr(routes, "build_report", lambda data, s: build_report(data, s, advice="Fine."))
    c = TestClient(app)
    c.post("/report/reset")
    c.delete("/live/sensor-error")
    yield c
    c.post("/report/reset")


def _mesh(x=0.5, y=0.45):
    return [[x, y, 0.0] for _ in range(478)]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_live_session_and_report(client):
    r = client.post("/live/start")
    assert r.json()["status"] == "started"
    r = client.post("/live/start")
    assert r.status_code == 409
    assert "already running" in r.json()["detail"]

    r = client.post("/live/landmarks", json={"landmarks": _mesh()})
    assert r.status_code == 200
    assert r.json()["gaze_lock"] is True

    assert client.post("/live/transcript", json={"text": "umm I like it"}).json() == {"fillers": ["umm", "like"]}
    assert client.post("/live/volume", json={"volume": 42}).status_code == 200

    st = client.get("/live/status").json()
    assert st["running"] is True
    assert st["volume"] == 42.0
    assert st["filler_words"] == {"umm": 1, "like": 1}

    r = client.post("/live/stop")
    assert r.status_code == 200
    data = r.json()
    assert data["filler_words"] == {"umm": 1, "like": 1}
    assert data["transcript"] == "umm I like it"

    r = client.get("/report")
    assert r.status_code == 200
    rep = r.json()
    assert rep["advice"] == "Fine."
    assert rep["total_fillers"] == 2
    assert rep["rank"] in {"ZENITH MASTER", "PROFESSIONAL", "INITIATE"}

    r = client.get("/report/image")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content[:4] == b"\x89PNG"


def test_face_lost_and_gaze(client):
    client.post("/live/start")
    assert client.post("/live/face-lost").json() == {"gaze_lock": False}
    assert client.get("/live/status").json()["tracking_accuracy"] == 0.0
    assert client.post("/live/gaze", json={"gaze_lock": True, "jitter": 0.001}).status_code == 200
    assert client.get("/live/status").json()["gaze_lock"] is True
    assert client.post("/live/gaze", json={"gaze_lock": True, "jitter": -1}).status_code == 422


def test_bad_landmarks_rejected(client):
    r = client.post("/live/landmarks", json={"landmarks": [[0.5, 0.5]] * 10})
    assert r.status_code == 422


def test_sensor_error_blocks_start(client):
    r = client.post("/live/sensor-error", json={"message": "Permission denied"})
    assert r.json() == {"sensor_error": "Permission denied"}
    assert client.get("/live/status").json()["sensor_error"] == "Permission denied"
    r = client.post("/live/start")
    assert r.status_code == 409
    client.delete("/live/sensor-error")
    assert client.post("/live/start").json()["status"] == "started"


def test_no_session_yet(client):
    assert client.post("/live/stop").status_code == 409
    assert client.get("/report").status_code == 404
    assert client.get("/report/image").status_code == 404
