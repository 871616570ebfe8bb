# tests/test_main.py
from fastapi.testclient import TestClient

from batteryfleet.main import app

# No context manager: startup hooks (schema creation) are not run
client = TestClient(app)


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "BatteryFleet API is running"
    assert body["docs_url"] == "/api/docs"


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_request_validation_is_422():
    response = client.post("/api/users/login", data={})
    assert response.status_code == 422
