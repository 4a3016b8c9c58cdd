from fastapi.testclient import TestClient
from contestpulse.main import app

client = TestClient(app)

def test_health_ok():
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert "request_id" in data
    assert "stats_provider_configured" in data

def test_health_echoes_request_id():
    r = client.get("/health", headers={"x-request-id": "req-123"})
    assert r.json()["request_id"] == "req-123"
    assert r.headers["X-Request-ID"] == "req-123"

def test_version_ok():
    r = client.get("/version")
    assert r.status_code == 200
    data = r.json()
    assert "version" in data and "git_sha" in data
