# tests/api/endpoints/test_batteries.py
from batteryfleet.core.config import settings
from batteryfleet.db.models.battery import Battery

from conftest import battery_data, login, make_user

BATTERIES_URL = f"{settings.API_PREFIX}/batteries"


def battery_payload(serial_number: str, **overrides):
    payload = battery_data(serial_number, **overrides)
    payload["manufacture_date"] = payload["manufacture_date"].isoformat()
    return payload


def create_battery(client, headers, serial_number: str, **overrides):
    response = client.post(f"{BATTERIES_URL}/", json=battery_payload(serial_number, **overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# --- Access policy ---

def test_list_requires_token(client):
    response = client.get(f"{BATTERIES_URL}/")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authorized, no token"


def test_garbage_token_is_rejected(client):
    response = client.get(f"{BATTERIES_URL}/", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authorized, token failed"


def test_operator_cannot_create(client, operator_headers):
    response = client.post(f"{BATTERIES_URL}/", json=battery_payload("OP-1"), headers=operator_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Not authorized as manager"


def test_manager_cannot_delete(client, manager_headers):
    battery = create_battery(client, manager_headers, "MGR-1")
    response = client.delete(f"{BATTERIES_URL}/{battery['id']}", headers=manager_headers)
    assert response.status_code == 403


def test_admin_can_create_and_delete(client, admin_headers, db_session):
    battery = create_battery(client, admin_headers, "ADM-1")

    response = client.delete(f"{BATTERIES_URL}/{battery['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Battery removed"}
    assert db_session.get(Battery, battery["id"]) is None


def test_cookie_authentication(client, db_session):
    make_user(db_session, "cookie@example.com")
    response = client.post(
        f"{settings.API_PREFIX}/users/login",
        data={"username": "cookie@example.com", "password": "secret123"},
    )
    assert response.status_code == 200
    assert settings.AUTH_COOKIE_NAME in response.cookies

    assert client.get(f"{BATTERIES_URL}/").status_code == 200

    client.post(f"{settings.API_PREFIX}/users/logout")
    client.cookies.clear()
    assert client.get(f"{BATTERIES_URL}/").status_code == 401


# --- CRUD ---

def test_create_returns_defaults(client, manager_headers):
    battery = create_battery(client, manager_headers, "NEW-1")
    assert battery["status"] == "Available"
    assert battery["health_status"] == 100
    assert battery["current_charge"] == 100
    assert battery["cycle_count"] == 0
    assert battery["location"] == "Warehouse"
    assert battery["shipment_id"] is None


def test_create_duplicate_serial(client, manager_headers):
    create_battery(client, manager_headers, "DUP-1")
    response = client.post(f"{BATTERIES_URL}/", json=battery_payload("DUP-1"), headers=manager_headers)
    assert response.status_code == 400


def test_create_with_missing_field(client, manager_headers):
    payload = battery_payload("MISS-1")
    del payload["model"]
    response = client.post(f"{BATTERIES_URL}/", json=payload, headers=manager_headers)
    assert response.status_code == 422


def test_get_battery_detail(client, manager_headers, operator_headers):
    battery = create_battery(client, manager_headers, "GET-1")
    response = client.get(f"{BATTERIES_URL}/{battery['id']}", headers=operator_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["serial_number"] == "GET-1"
    assert body["shipment"] is None


def test_get_missing_battery(client, operator_headers):
    response = client.get(f"{BATTERIES_URL}/999", headers=operator_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Battery not found"


def test_partial_update(client, manager_headers):
    battery = create_battery(client, manager_headers, "UPD-1", notes="original")
    response = client.put(
        f"{BATTERIES_URL}/{battery['id']}",
        json={"health_status": 64, "location": "Bay 2"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["health_status"] == 64
    assert body["location"] == "Bay 2"
    assert body["notes"] == "original"


def test_update_out_of_range_is_rejected_by_schema(client, manager_headers):
    battery = create_battery(client, manager_headers, "UPD-2")
    response = client.put(
        f"{BATTERIES_URL}/{battery['id']}", json={"health_status": 140}, headers=manager_headers
    )
    assert response.status_code == 422


def test_update_missing_battery(client, manager_headers):
    response = client.put(f"{BATTERIES_URL}/321", json={"model": "X"}, headers=manager_headers)
    assert response.status_code == 404


def test_operator_updates_charge(client, manager_headers, operator_headers):
    battery = create_battery(client, manager_headers, "CHG-1")
    response = client.put(
        f"{BATTERIES_URL}/{battery['id']}/charge", json={"current_charge": 37.5}, headers=operator_headers
    )
    assert response.status_code == 200
    assert response.json()["current_charge"] == 37.5


def test_charge_validation(client, manager_headers):
    battery = create_battery(client, manager_headers, "CHG-2")
    url = f"{BATTERIES_URL}/{battery['id']}/charge"
    assert client.put(url, json={"current_charge": 101}, headers=manager_headers).status_code == 400
    assert client.put(url, json={}, headers=manager_headers).status_code == 400
    assert client.put(f"{BATTERIES_URL}/888/charge", json={"current_charge": 10}, headers=manager_headers).status_code == 404


# --- Listing ---

def test_list_page_shape(client, manager_headers):
    for i in range(12):
        create_battery(client, manager_headers, f"PG-{i:02d}")

    first = client.get(f"{BATTERIES_URL}/", headers=manager_headers).json()
    assert first["page"] == 1
    assert first["pages"] == 2
    assert first["total"] == 12
    assert len(first["batteries"]) == 10
    assert first["batteries"][0]["serial_number"] == "PG-11"

    second = client.get(f"{BATTERIES_URL}/", params={"page_number": 2}, headers=manager_headers).json()
    assert second["page"] == 2
    assert len(second["batteries"]) == 2


def test_list_filters(client, manager_headers):
    create_battery(client, manager_headers, "FLT-1", manufacturer="Acme", health_status=90)
    create_battery(client, manager_headers, "FLT-2", manufacturer="Voltix", health_status=20)

    by_keyword = client.get(f"{BATTERIES_URL}/", params={"keyword": "acme"}, headers=manager_headers).json()
    assert [b["serial_number"] for b in by_keyword["batteries"]] == ["FLT-1"]

    by_health = client.get(f"{BATTERIES_URL}/", params={"min_health": 50}, headers=manager_headers).json()
    assert [b["serial_number"] for b in by_health["batteries"]] == ["FLT-1"]

    by_status = client.get(f"{BATTERIES_URL}/", params={"status": "Defective"}, headers=manager_headers).json()
    assert by_status["total"] == 0


def test_list_unknown_status_is_rejected(client, manager_headers):
    response = client.get(f"{BATTERIES_URL}/", params={"status": "Lost"}, headers=manager_headers)
    assert response.status_code == 422


def test_critical_listing(client, manager_headers):
    create_battery(client, manager_headers, "CRIT-1", health_status=12)
    create_battery(client, manager_headers, "CRIT-2", health_status=3)
    create_battery(client, manager_headers, "FINE-1", health_status=95)

    response = client.get(f"{BATTERIES_URL}/critical", headers=manager_headers)
    assert response.status_code == 200
    assert [b["serial_number"] for b in response.json()] == ["CRIT-2", "CRIT-1"]


def test_update_rejects_blank_serial_number(client, manager_headers):
    battery = create_battery(client, manager_headers, "BLANK-1")
    url = f"{BATTERIES_URL}/{battery['id']}"

    assert client.put(url, json={"serial_number": "   "}, headers=manager_headers).status_code == 422
    assert client.put(url, json={"model": ""}, headers=manager_headers).status_code == 422
    assert client.get(url, headers=manager_headers).json()["serial_number"] == "BLANK-1"
