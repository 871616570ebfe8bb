# tests/services/test_battery_service.py
from datetime import datetime, timedelta

import pytest

from batteryfleet.core.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)
from batteryfleet.db.models.battery import Battery
from batteryfleet.db.models.enums import BatteryStatus
from batteryfleet.services.battery_service import BatteryService
from batteryfleet.services.shipment_service import ShipmentService

from conftest import battery_data, shipment_data


@pytest.fixture()
def service(db_session):
    return BatteryService(db_session)


def test_create_battery_applies_defaults(service):
    battery = service.create_battery(battery_data("B-100"))

    assert battery.id is not None
    assert battery.status == BatteryStatus.AVAILABLE.value
    assert battery.health_status == 100
    assert battery.current_charge == 100
    assert battery.cycle_count == 0
    assert battery.location == "Warehouse"
    assert battery.last_checked_date is not None
    assert battery.shipment_id is None


def test_create_then_get_round_trip(service):
    created = service.create_battery(
        battery_data("B-RT", health_status=87.5, current_charge=42, cycle_count=12, notes="spare")
    )

    fetched = service.get_battery(created.id)
    assert fetched.serial_number == "B-RT"
    assert fetched.model == "PowerCell 5000"
    assert fetched.chemistry == "Li-ion"
    assert fetched.capacity_unit == "mAh"
    assert fetched.health_status == 87.5
    assert fetched.current_charge == 42
    assert fetched.cycle_count == 12
    assert fetched.notes == "spare"
    assert fetched.age >= 0


def test_duplicate_serial_number_leaves_store_unchanged(service, db_session):
    service.create_battery(battery_data("B-DUP", model="Original"))

    with pytest.raises(DuplicateEntityException):
        service.create_battery(battery_data("B-DUP", model="Impostor"))

    batteries = db_session.query(Battery).all()
    assert len(batteries) == 1
    assert batteries[0].model == "Original"


@pytest.mark.parametrize("field,value", [
    ("health_status", 101),
    ("health_status", -1),
    ("current_charge", 100.5),
    ("current_charge", -0.1),
])
def test_create_rejects_out_of_range_percentages(service, db_session, field, value):
    with pytest.raises(ValidationException):
        service.create_battery(battery_data("B-BAD", **{field: value}))
    assert db_session.query(Battery).count() == 0


def test_update_applies_only_present_fields_including_falsy(service):
    battery = service.create_battery(battery_data("B-UPD", notes="keep", cycle_count=40))

    updated = service.update_battery(
        battery.id, {"current_charge": 0, "cycle_count": 0, "location": ""}
    )

    assert updated.current_charge == 0
    assert updated.cycle_count == 0
    assert updated.location == ""
    assert updated.notes == "keep"
    assert updated.model == "PowerCell 5000"


def test_update_refreshes_last_checked_date(service, db_session):
    battery = service.create_battery(battery_data("B-CHK"))
    stale = datetime(2020, 1, 1)
    battery.last_checked_date = stale
    db_session.commit()

    updated = service.update_battery(battery.id, {"notes": "inspected"})
    assert updated.last_checked_date > stale + timedelta(days=1)


def test_update_rejects_null_for_required_field(service):
    battery = service.create_battery(battery_data("B-NULL"))

    with pytest.raises(ValidationException) as exc_info:
        service.update_battery(battery.id, {"model": None})
    assert "model" in exc_info.value.details["validation_errors"]


def test_update_allows_null_notes(service):
    battery = service.create_battery(battery_data("B-NOTES", notes="temporary"))
    updated = service.update_battery(battery.id, {"notes": None})
    assert updated.notes is None


def test_update_serial_collision_is_duplicate(service):
    service.create_battery(battery_data("B-ONE"))
    second = service.create_battery(battery_data("B-TWO"))

    with pytest.raises(DuplicateEntityException):
        service.update_battery(second.id, {"serial_number": "B-ONE"})

    assert service.get_battery(second.id).serial_number == "B-TWO"


@pytest.mark.parametrize("field,value", [
    ("serial_number", ""),
    ("serial_number", "   "),
    ("model", ""),
    ("manufacturer", " "),
])
def test_update_rejects_blank_identifying_field(service, field, value):
    battery = service.create_battery(battery_data("B-BLANK"))
    with pytest.raises(ValidationException):
        service.update_battery(battery.id, {field: value})
    assert service.get_battery(battery.id).serial_number == "B-BLANK"


def test_create_rejects_blank_serial_number(service, db_session):
    with pytest.raises(ValidationException):
        service.create_battery(battery_data("  "))
    assert db_session.query(Battery).count() == 0


def test_update_strips_serial_number(service):
    battery = service.create_battery(battery_data("B-PAD"))
    updated = service.update_battery(battery.id, {"serial_number": " B-PADDED  "})
    assert updated.serial_number == "B-PADDED"


def test_update_keeping_own_serial_is_allowed(service):
    battery = service.create_battery(battery_data("B-SAME"))
    updated = service.update_battery(battery.id, {"serial_number": "B-SAME", "model": "Rev B"})
    assert updated.model == "Rev B"


def test_update_missing_battery_raises_not_found(service):
    with pytest.raises(EntityNotFoundException):
        service.update_battery(999, {"model": "Ghost"})


def test_update_rejects_out_of_range_health(service):
    battery = service.create_battery(battery_data("B-HEALTH"))
    with pytest.raises(ValidationException):
        service.update_battery(battery.id, {"health_status": 150})
    assert service.get_battery(battery.id).health_status == 100


def test_update_charge(service):
    battery = service.create_battery(battery_data("B-CHG"))
    updated = service.update_charge(battery.id, 55)
    assert updated.current_charge == 55


@pytest.mark.parametrize("value", [None, -5, 120])
def test_update_charge_rejects_missing_or_out_of_range(service, value):
    battery = service.create_battery(battery_data("B-CHG2"))
    with pytest.raises(ValidationException):
        service.update_charge(battery.id, value)
    assert service.get_battery(battery.id).current_charge == 100


def test_update_charge_missing_battery(service):
    with pytest.raises(EntityNotFoundException):
        service.update_charge(12345, 50)


def test_delete_battery(service, db_session):
    battery = service.create_battery(battery_data("B-DEL"))
    service.delete_battery(battery.id)
    assert db_session.get(Battery, battery.id) is None


def test_delete_missing_battery(service):
    with pytest.raises(EntityNotFoundException):
        service.delete_battery(404)


def test_delete_battery_removes_exactly_its_id_from_shipment(service, db_session):
    b1 = service.create_battery(battery_data("B-S1"))
    b2 = service.create_battery(battery_data("B-S2"))
    b3 = service.create_battery(battery_data("B-S3"))
    shipment = ShipmentService(db_session).create_shipment(
        shipment_data("SHP-DEL", batteries=[b1.id, b2.id, b3.id])
    )

    service.delete_battery(b2.id)

    db_session.expire_all()
    shipment = ShipmentService(db_session).get_shipment(shipment.id)
    assert [b.id for b in shipment.batteries] == [b1.id, b3.id]


def test_list_critical_sorted_ascending(service):
    service.create_battery(battery_data("B-OK", health_status=80))
    service.create_battery(battery_data("B-LOW", health_status=25))
    service.create_battery(battery_data("B-WORST", health_status=5))
    service.create_battery(battery_data("B-EDGE", health_status=30))

    critical = service.list_critical()
    assert [b.serial_number for b in critical] == ["B-WORST", "B-LOW"]


def test_list_critical_uses_configured_threshold(db_session):
    service = BatteryService(db_session, critical_health_threshold=50)
    service.create_battery(battery_data("B-45", health_status=45))
    service.create_battery(battery_data("B-55", health_status=55))
    assert [b.serial_number for b in service.list_critical()] == ["B-45"]


def test_list_batteries_paginates_newest_first(service):
    for i in range(12):
        service.create_battery(battery_data(f"B-{i:02d}"))

    first = service.list_batteries(page=1)
    second = service.list_batteries(page=2)

    assert first["total"] == 12
    assert first["pages"] == 2
    assert len(first["batteries"]) == 10
    assert len(second["batteries"]) == 2
    assert first["batteries"][0].serial_number == "B-11"
    assert second["batteries"][-1].serial_number == "B-00"


def test_list_batteries_filters(service):
    service.create_battery(battery_data("ALPHA-1", manufacturer="Acme", health_status=90))
    service.create_battery(battery_data("BETA-1", manufacturer="Voltix", health_status=40))
    service.create_battery(
        battery_data("GAMMA-1", manufacturer="acme industries", health_status=70, status="Maintenance")
    )

    by_keyword = service.list_batteries(keyword="ACME")
    assert {b.serial_number for b in by_keyword["batteries"]} == {"ALPHA-1", "GAMMA-1"}

    by_status = service.list_batteries(status="Maintenance")
    assert [b.serial_number for b in by_status["batteries"]] == ["GAMMA-1"]

    by_health = service.list_batteries(min_health=70)
    assert {b.serial_number for b in by_health["batteries"]} == {"ALPHA-1", "GAMMA-1"}


def test_list_batteries_empty(service):
    result = service.list_batteries(page=1)
    assert result == {"batteries": [], "page": 1, "pages": 0, "total": 0}
