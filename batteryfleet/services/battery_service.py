# File: batteryfleet/services/battery_service.py
"""
Battery service for BatteryFleet.

Handles the battery lifecycle: registration, partial updates, charge
updates, deletion, and the paginated and critical-health listings.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from batteryfleet.core.config import settings
from batteryfleet.core.exceptions import (
    DuplicateEntityException,
    ValidationException,
)
from batteryfleet.db.models.base import utcnow
from batteryfleet.db.models.battery import Battery
from batteryfleet.repositories.battery_repository import BatteryRepository
from batteryfleet.services.base_service import BaseService

logger = logging.getLogger(__name__)

# Fields a client may change through a battery update
UPDATABLE_FIELDS = {
    "serial_number",
    "model",
    "manufacturer",
    "capacity",
    "capacity_unit",
    "voltage",
    "chemistry",
    "manufacture_date",
    "notes",
    "status",
    "health_status",
    "current_charge",
    "cycle_count",
    "location",
}

NULLABLE_FIELDS = {"notes"}

NON_BLANK_FIELDS = ("serial_number", "model", "manufacturer")

PERCENT_FIELDS = ("health_status", "current_charge")


def _validate_percentages(data: Dict[str, Any]) -> None:
    """Raise ValidationException for any percentage field outside 0-100."""
    errors = {}
    for field in PERCENT_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not 0 <= value <= 100:
            errors[field] = ["Must be a number between 0 and 100"]
    if "cycle_count" in data and (data["cycle_count"] is None or data["cycle_count"] < 0):
        errors["cycle_count"] = ["Must be zero or greater"]
    if errors:
        raise ValidationException("Invalid battery values", errors)


def _normalize_text_fields(data: Dict[str, Any]) -> None:
    """Strip the serial number and reject blank identifying fields."""
    if isinstance(data.get("serial_number"), str):
        data["serial_number"] = data["serial_number"].strip()
    blank_fields = [
        k for k in NON_BLANK_FIELDS if isinstance(data.get(k), str) and not data[k].strip()
    ]
    if blank_fields:
        raise ValidationException(
            "Required fields cannot be blank",
            {field: ["Cannot be blank"] for field in blank_fields},
        )


class BatteryService(BaseService[Battery]):
    """
    Service for managing batteries.
    """

    def __init__(
        self,
        session: Session,
        repository: Optional[BatteryRepository] = None,
        event_bus=None,
        critical_health_threshold: Optional[float] = None,
    ):
        super().__init__(session, repository=repository or BatteryRepository(session), event_bus=event_bus)
        self.critical_health_threshold = (
            settings.CRITICAL_HEALTH_THRESHOLD
            if critical_health_threshold is None
            else critical_health_threshold
        )

    def create_battery(self, data: Dict[str, Any]) -> Battery:
        """
        Register a new battery.

        Args:
            data: Battery field values

        Returns:
            The created battery

        Raises:
            DuplicateEntityException: If the serial number is already registered
            ValidationException: If health or charge is out of range
        """
        data = dict(data)
        _normalize_text_fields(data)
        _validate_percentages(data)

        with self.transaction():
            serial_number = data.get("serial_number")
            if self.repository.get_by_serial_number(serial_number):
                raise DuplicateEntityException(
                    "Battery with this serial number already exists",
                    {"serial_number": serial_number},
                )

            values = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
            values.setdefault("last_checked_date", utcnow())
            battery = self.repository.create(values)

        logger.info(f"Created battery {battery.id} ({battery.serial_number})")
        return battery

    def update_battery(self, battery_id: int, data: Dict[str, Any]) -> Battery:
        """
        Apply a partial update to a battery.

        Only keys present in `data` are applied, including falsy values.
        `last_checked_date` is refreshed on every update.

        Raises:
            EntityNotFoundException: If the battery does not exist
            DuplicateEntityException: If the new serial number belongs to another battery
            ValidationException: On null or blank required fields or out-of-range values
        """
        data = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}

        null_fields = [k for k, v in data.items() if v is None and k not in NULLABLE_FIELDS]
        if null_fields:
            raise ValidationException(
                "Required fields cannot be null",
                {field: ["Cannot be null"] for field in null_fields},
            )
        _normalize_text_fields(data)
        _validate_percentages(data)

        with self.transaction():
            battery = self.get_or_raise(battery_id, "Battery")

            new_serial = data.get("serial_number")
            if new_serial is not None and new_serial != battery.serial_number:
                existing = self.repository.get_by_serial_number(new_serial)
                if existing and existing.id != battery.id:
                    raise DuplicateEntityException(
                        "Battery with this serial number already exists",
                        {"serial_number": new_serial},
                    )

            data["last_checked_date"] = utcnow()
            self.repository.update(battery, data)

        logger.info(f"Updated battery {battery_id}: {sorted(k for k in data if k != 'last_checked_date')}")
        return battery

    def update_charge(self, battery_id: int, current_charge: Optional[float]) -> Battery:
        """
        Set the state of charge of a battery.

        Raises:
            ValidationException: If the value is missing or outside 0-100
            EntityNotFoundException: If the battery does not exist
        """
        if current_charge is None:
            raise ValidationException(
                "Current charge is required", {"current_charge": ["This field is required"]}
            )
        _validate_percentages({"current_charge": current_charge})

        with self.transaction():
            battery = self.get_or_raise(battery_id, "Battery")
            self.repository.update(
                battery,
                {"current_charge": current_charge, "last_checked_date": utcnow()},
            )

        logger.info(f"Battery {battery_id} charge set to {current_charge}%")
        return battery

    def delete_battery(self, battery_id: int) -> None:
        """
        Delete a battery, removing it from its shipment first.

        Raises:
            EntityNotFoundException: If the battery does not exist
        """
        with self.transaction():
            battery = self.get_or_raise(battery_id, "Battery")
            shipment_id = battery.shipment_id
            if shipment_id is not None:
                self.repository.update(battery, {"shipment_id": None})
                logger.info(f"Detached battery {battery_id} from shipment {shipment_id}")
            self.repository.delete(battery)

        logger.info(f"Deleted battery {battery_id}")

    def get_battery(self, battery_id: int) -> Battery:
        return self.get_or_raise(battery_id, "Battery")

    def list_batteries(
        self,
        page: int = 1,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
        min_health: Optional[float] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Get one page of batteries, newest first.

        Returns:
            Dictionary with `batteries`, `page`, `pages` and `total`
        """
        page = max(1, page or 1)
        batteries, total, pages = self.repository.search_page(
            page=page,
            page_size=page_size or settings.PAGE_SIZE,
            keyword=keyword,
            status=status,
            min_health=min_health,
        )
        return {"batteries": batteries, "page": page, "pages": pages, "total": total}

    def list_critical(self) -> List[Battery]:
        """Batteries whose health is below the critical threshold, weakest first."""
        return self.repository.list_below_health(self.critical_health_threshold)
