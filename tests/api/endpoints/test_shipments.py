# tests/api/endpoints/test_shipments.py
from batteryfleet.core.config import settings

from conftest import battery_data, shipment_data

SHIPMENTS_URL = f"{settings.API_PREFIX}/shipments"
BATTERIES_URL = f"{settings.API_PREFIX}/batteries"


def create_battery(client, headers, serial_number: str) -> int:
    payload = battery_data(serial_number)
    payload["manufacture_date"] = payload["manufacture_date"].isoformat()
    response = client.post(f"{BATTERIES_URL}/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]


def create_shipment(client, headers, number: str, batteries=None, **overrides):
    response = client.post(
        f"{SHIPMENTS_URL}/", json=shipment_data(number, batteries=batteries, **overrides), headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


def get_battery(client, headers, battery_id: int):
    return client.get(f"{BATTERIES_URL}/{battery_id}", headers=headers).json()


# --- Access policy ---

def test_shipments_require_token(client):
    assert client.get(f"{SHIPMENTS_URL}/").status_code == 401
    assert client.get(f"{SHIPMENTS_URL}/alerts").status_code == 401


def test_operator_cannot_create_or_update(client, operator_headers, manager_headers):
    response = client.post(f"{SHIPMENTS_URL}/", json=shipment_data("OP-S"), headers=operator_headers)
    assert response.status_code == 403

    shipment = create_shipment(client, manager_headers, "OP-S2")
    response = client.put(
        f"{SHIPMENTS_URL}/{shipment['id']}", json={"status": "In Transit"}, headers=operator_headers
    )
    assert response.status_code == 403


def test_manager_cannot_delete(client, manager_headers):
    shipment = create_shipment(client, manager_headers, "MGR-S")
    assert client.delete(f"{SHIPMENTS_URL}/{shipment['id']}", headers=manager_headers).status_code == 403


# --- Lifecycle ---

def test_create_shipment_detail(client, manager_headers):
    battery_id = create_battery(client, manager_headers, "B1")

    shipment = create_shipment(client, manager_headers, "SHP-1", batteries=[battery_id])

    assert shipment["status"] == "Preparing"
    assert shipment["current_location"] == "Warehouse A"
    assert shipment["battery_count"] == 1
    assert [b["id"] for b in shipment["batteries"]] == [battery_id]
    assert len(shipment["status_updates"]) == 1
    assert shipment["status_updates"][0]["updated_by"]["email"] == "manager@example.com"

    battery = get_battery(client, manager_headers, battery_id)
    assert battery["status"] == "In Transit"
    assert battery["shipment"]["shipment_number"] == "SHP-1"


def test_create_duplicate_number(client, manager_headers):
    create_shipment(client, manager_headers, "SHP-DUP")
    response = client.post(f"{SHIPMENTS_URL}/", json=shipment_data("SHP-DUP"), headers=manager_headers)
    assert response.status_code == 400


def test_create_with_unknown_battery(client, manager_headers):
    response = client.post(
        f"{SHIPMENTS_URL}/", json=shipment_data("SHP-404", batteries=[4242]), headers=manager_headers
    )
    assert response.status_code == 404
    assert client.get(f"{SHIPMENTS_URL}/", headers=manager_headers).json()["total"] == 0


def test_deliver_shipment(client, manager_headers):
    battery_id = create_battery(client, manager_headers, "B1")
    shipment = create_shipment(client, manager_headers, "SHP-1", batteries=[battery_id])

    response = client.put(
        f"{SHIPMENTS_URL}/{shipment['id']}",
        json={"status": "Delivered", "current_location": "Dock B", "status_notes": "Signed for"},
        headers=manager_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Delivered"
    assert body["current_location"] == "Dock B"
    assert body["actual_arrival"] is not None
    assert body["status_updates"][-1]["notes"] == "Signed for"

    battery = get_battery(client, manager_headers, battery_id)
    assert battery["status"] == "Available"
    assert battery["location"] == "Dock B"


def test_update_rejects_unknown_status(client, manager_headers):
    shipment = create_shipment(client, manager_headers, "SHP-BAD")
    response = client.put(
        f"{SHIPMENTS_URL}/{shipment['id']}", json={"status": "Lost"}, headers=manager_headers
    )
    assert response.status_code == 422


def test_update_null_required_field(client, manager_headers):
    shipment = create_shipment(client, manager_headers, "SHP-NULL")
    response = client.put(
        f"{SHIPMENTS_URL}/{shipment['id']}", json={"destination": None}, headers=manager_headers
    )
    assert response.status_code == 400


def test_replace_batteries(client, manager_headers):
    b1 = create_battery(client, manager_headers, "B1")
    b2 = create_battery(client, manager_headers, "B2")
    shipment = create_shipment(client, manager_headers, "SHP-R", batteries=[b1])

    response = client.put(
        f"{SHIPMENTS_URL}/{shipment['id']}", json={"batteries": [b2]}, headers=manager_headers
    )

    assert response.status_code == 200
    assert [b["id"] for b in response.json()["batteries"]] == [b2]
    released = get_battery(client, manager_headers, b1)
    assert released["shipment_id"] is None
    assert released["status"] == "Available"


def test_update_missing_shipment(client, manager_headers):
    response = client.put(f"{SHIPMENTS_URL}/77", json={"carrier": "X"}, headers=manager_headers)
    assert response.status_code == 404


def test_admin_deletes_shipment(client, manager_headers, admin_headers):
    battery_id = create_battery(client, manager_headers, "B1")
    shipment = create_shipment(client, manager_headers, "SHP-DEL", batteries=[battery_id])

    response = client.delete(f"{SHIPMENTS_URL}/{shipment['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Shipment removed"}
    assert client.get(f"{SHIPMENTS_URL}/{shipment['id']}", headers=admin_headers).status_code == 404
    assert get_battery(client, admin_headers, battery_id)["shipment_id"] is None


# --- Environmental logs ---

def test_add_log_as_operator(client, manager_headers, operator_headers):
    shipment = create_shipment(client, manager_headers, "SHP-T")

    response = client.post(
        f"{SHIPMENTS_URL}/{shipment['id']}/logs",
        json={"type": "temperature", "value": 50},
        headers=operator_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "temperature log added"
    assert body["is_alert"] is True
    assert body["log"]["type"] == "temperature"
    assert body["log"]["value"] == 50

    mild = client.post(
        f"{SHIPMENTS_URL}/{shipment['id']}/logs",
        json={"type": "temperature", "value": 20},
        headers=operator_headers,
    ).json()
    assert mild["is_alert"] is False

    detail = client.get(f"{SHIPMENTS_URL}/{shipment['id']}", headers=operator_headers).json()
    assert [log["is_alert"] for log in detail["temperature_logs"]] == [True, False]


def test_add_log_validation(client, manager_headers):
    shipment = create_shipment(client, manager_headers, "SHP-V")
    url = f"{SHIPMENTS_URL}/{shipment['id']}/logs"

    assert client.post(url, json={"type": "pressure", "value": 3}, headers=manager_headers).status_code == 400
    assert client.post(url, json={"type": "humidity"}, headers=manager_headers).status_code == 400
    response = client.post(
        f"{SHIPMENTS_URL}/999/logs", json={"type": "shock", "value": 1}, headers=manager_headers
    )
    assert response.status_code == 404


def test_alerts_listing(client, manager_headers):
    quiet = create_shipment(client, manager_headers, "SHP-Q")
    noisy = create_shipment(client, manager_headers, "SHP-N")
    client.post(f"{SHIPMENTS_URL}/{quiet['id']}/logs", json={"type": "humidity", "value": 50}, headers=manager_headers)
    client.post(f"{SHIPMENTS_URL}/{noisy['id']}/logs", json={"type": "shock", "value": 12}, headers=manager_headers)

    response = client.get(f"{SHIPMENTS_URL}/alerts", headers=manager_headers)

    assert response.status_code == 200
    assert [s["shipment_number"] for s in response.json()] == ["SHP-N"]


# --- Listing ---

def test_list_shipments_page(client, manager_headers):
    for i in range(3):
        create_shipment(client, manager_headers, f"SHP-L{i}", carrier="Northline" if i == 1 else "FastFreight")

    body = client.get(f"{SHIPMENTS_URL}/", headers=manager_headers).json()
    assert body["total"] == 3
    assert body["pages"] == 1
    assert [s["shipment_number"] for s in body["shipments"]] == ["SHP-L2", "SHP-L1", "SHP-L0"]

    filtered = client.get(f"{SHIPMENTS_URL}/", params={"keyword": "north"}, headers=manager_headers).json()
    assert [s["shipment_number"] for s in filtered["shipments"]] == ["SHP-L1"]


def test_update_rejects_blank_identity_fields(client, manager_headers):
    shipment = create_shipment(client, manager_headers, "SHP-KEEP")
    url = f"{SHIPMENTS_URL}/{shipment['id']}"

    for body in ({"shipment_number": ""}, {"shipment_number": "  "}, {"origin": ""}, {"carrier": ""}):
        assert client.put(url, json=body, headers=manager_headers).status_code == 422

    assert client.get(url, headers=manager_headers).json()["shipment_number"] == "SHP-KEEP"
