# File: batteryfleet/services/shipment_service.py
"""
Shipment service for BatteryFleet.

This module provides functionality for managing battery shipments: creation
with initial battery loading, status transitions that cascade to member
batteries, membership changes, deletion, and environmental readings.
Each operation runs in a single transaction.
"""

from typing import List, Optional, Dict, Any
from datetime import datetime
import logging

from sqlalchemy.orm import Session

from batteryfleet.core.config import settings
from batteryfleet.core.events import (
    ShipmentCreated,
    ShipmentStatusChanged,
    ShipmentBatteriesChanged,
    EnvironmentalAlertRaised,
)
from batteryfleet.core.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidStatusTransitionException,
    ValidationException,
)
from batteryfleet.db.models.base import utcnow
from batteryfleet.db.models.enums import BatteryStatus, ReadingType, ShipmentStatus
from batteryfleet.db.models.shipment import Shipment, TemperatureLog, HumidityLog, ShockEvent
from batteryfleet.repositories.battery_repository import BatteryRepository
from batteryfleet.repositories.shipment_repository import ShipmentRepository
from batteryfleet.repositories.user_repository import UserRepository
from batteryfleet.services.base_service import BaseService
from batteryfleet.services.environmental_alerts import is_alert

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "shipment_number",
    "origin",
    "destination",
    "carrier",
    "tracking_number",
    "departure_date",
    "estimated_arrival",
    "hazard_class",
    "special_instructions",
    "customs_information",
    "assigned_to_id",
}

REQUIRED_FIELDS = {"shipment_number", "origin", "destination", "carrier", "hazard_class"}

# Shipment statuses that hand member batteries back as available
_TERMINAL_STATUSES = (ShipmentStatus.DELIVERED.value, ShipmentStatus.CANCELLED.value)

_READING_MODELS = {
    ReadingType.TEMPERATURE.value: (TemperatureLog, "value"),
    ReadingType.HUMIDITY.value: (HumidityLog, "value"),
    ReadingType.SHOCK.value: (ShockEvent, "magnitude"),
}


class ShipmentService(BaseService[Shipment]):
    """
    Service for managing battery shipments.

    Provides functionality for:
    - Shipment creation and battery loading
    - Status transitions with battery cascades
    - Membership changes
    - Environmental readings and active-alert listing
    """

    def __init__(
        self,
        session: Session,
        repository: Optional[ShipmentRepository] = None,
        battery_repository: Optional[BatteryRepository] = None,
        user_repository: Optional[UserRepository] = None,
        event_bus=None,
        strict_status_transitions: Optional[bool] = None,
    ):
        """
        Initialize ShipmentService with dependencies.

        Args:
            session: Database session for persistence operations
            repository: Optional shipment repository
            battery_repository: Optional battery repository
            user_repository: Optional user repository, used to check assignees
            event_bus: Optional event bus for publishing domain events
            strict_status_transitions: Reject transitions outside the shipment
                state machine; defaults to the STRICT_STATUS_TRANSITIONS setting
        """
        super().__init__(session, repository=repository or ShipmentRepository(session), event_bus=event_bus)
        self.battery_repository = battery_repository or BatteryRepository(session)
        self.user_repository = user_repository or UserRepository(session)
        self.strict_status_transitions = (
            settings.STRICT_STATUS_TRANSITIONS
            if strict_status_transitions is None
            else strict_status_transitions
        )

    # --- Queries ---

    def get_shipment(self, shipment_id: int) -> Shipment:
        return self.get_or_raise(shipment_id, "Shipment")

    def list_shipments(
        self,
        page: int = 1,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Get one page of shipments, newest first.

        Returns:
            Dictionary with `shipments`, `page`, `pages` and `total`
        """
        page = max(1, page or 1)
        shipments, total, pages = self.repository.search_page(
            page=page,
            page_size=page_size or settings.PAGE_SIZE,
            keyword=keyword,
            status=status,
        )
        return {"shipments": shipments, "page": page, "pages": pages, "total": total}

    def list_with_active_alerts(self) -> List[Shipment]:
        """Active shipments with at least one alert-flagged reading, most recently modified first."""
        return self.repository.list_with_active_alerts()

    # --- Mutations ---

    def create_shipment(self, data: Dict[str, Any], user_id: Optional[int] = None) -> Shipment:
        """
        Create a new shipment and load the listed batteries onto it.

        Args:
            data: Shipment field values; `batteries` holds battery IDs to load
            user_id: ID of the user creating the shipment

        Returns:
            Created shipment entity

        Raises:
            DuplicateEntityException: If the shipment number is taken
            EntityNotFoundException: If a listed battery or the assignee does not exist
        """
        data = dict(data)
        battery_ids = list(dict.fromkeys(data.pop("batteries", None) or []))
        values = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}

        with self.transaction():
            shipment_number = values.get("shipment_number")
            if self.repository.get_by_number(shipment_number):
                raise DuplicateEntityException(
                    "Shipment with this number already exists",
                    {"shipment_number": shipment_number},
                )
            self._ensure_batteries_exist(battery_ids)
            self._ensure_assignee_exists(values.get("assigned_to_id"))

            origin = values["origin"]
            values["status"] = ShipmentStatus.PREPARING.value
            values["current_location"] = origin
            shipment = self.repository.create(values)

            self.repository.add_status_update(
                shipment,
                status=ShipmentStatus.PREPARING.value,
                location=origin,
                notes="Shipment created",
                updated_by_id=user_id,
            )
            self.battery_repository.attach_to_shipment(battery_ids, shipment.id, origin)
            self.session.expire(shipment, ["batteries"])

            self._queue_event(
                ShipmentCreated(
                    shipment_id=shipment.id,
                    shipment_number=shipment.shipment_number,
                    battery_ids=battery_ids,
                    user_id=user_id,
                )
            )

        logger.info(
            f"Created shipment {shipment.id} ({shipment.shipment_number}) with {len(battery_ids)} batteries"
        )
        return shipment

    def update_shipment(
        self, shipment_id: int, data: Dict[str, Any], user_id: Optional[int] = None
    ) -> Shipment:
        """
        Apply a partial update to a shipment.

        A status change (status differs from the current one) records a
        status update and moves every member battery along with it. A
        `batteries` list replaces the membership after any status change.

        Raises:
            EntityNotFoundException: If the shipment, a listed battery, or the assignee does not exist
            DuplicateEntityException: If the new shipment number belongs to another shipment
            ValidationException: On null or blank required fields
            InvalidStatusTransitionException: In strict mode, for disallowed transitions
        """
        data = dict(data)
        new_status = data.pop("status", None)
        new_location = data.pop("current_location", None)
        status_notes = data.pop("status_notes", None)
        battery_ids = data.pop("batteries", None)
        values = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}

        null_fields = [k for k, v in values.items() if v is None and k in REQUIRED_FIELDS]
        if null_fields:
            raise ValidationException(
                "Required fields cannot be null",
                {field: ["Cannot be null"] for field in null_fields},
            )
        if isinstance(values.get("shipment_number"), str):
            values["shipment_number"] = values["shipment_number"].strip()
        blank_fields = [
            k for k, v in values.items() if k in REQUIRED_FIELDS and isinstance(v, str) and not v.strip()
        ]
        if blank_fields:
            raise ValidationException(
                "Required fields cannot be blank",
                {field: ["Cannot be blank"] for field in blank_fields},
            )

        with self.transaction():
            shipment = self.get_or_raise(shipment_id, "Shipment")

            new_number = values.get("shipment_number")
            if new_number is not None and new_number != shipment.shipment_number:
                existing = self.repository.get_by_number(new_number)
                if existing and existing.id != shipment.id:
                    raise DuplicateEntityException(
                        "Shipment with this number already exists",
                        {"shipment_number": new_number},
                    )
            if "assigned_to_id" in values:
                self._ensure_assignee_exists(values["assigned_to_id"])
            if battery_ids is not None:
                battery_ids = list(dict.fromkeys(battery_ids))
                self._ensure_batteries_exist(battery_ids)

            self.repository.update(shipment, values)

            if new_status is not None and new_status != shipment.status:
                self._apply_status_change(shipment, new_status, new_location, status_notes, user_id)

            if battery_ids is not None:
                self._replace_batteries(shipment, battery_ids, user_id)

            self.session.expire(shipment, ["batteries"])

        logger.info(f"Updated shipment {shipment_id}")
        return shipment

    def delete_shipment(self, shipment_id: int) -> None:
        """
        Delete a shipment after releasing its batteries.

        Raises:
            EntityNotFoundException: If the shipment does not exist
        """
        with self.transaction():
            shipment = self.get_or_raise(shipment_id, "Shipment")
            released = self.battery_repository.release_all_from_shipment(
                shipment.id, shipment.current_location
            )
            self.session.expire(shipment, ["batteries"])
            self.repository.delete(shipment)

        logger.info(f"Deleted shipment {shipment_id}, released {released} batteries")

    def add_environmental_log(
        self,
        shipment_id: int,
        reading_type: Optional[str],
        value: Optional[float],
        timestamp: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Record an environmental reading on a shipment.

        The alert flag is computed once here and never revisited.

        Args:
            shipment_id: ID of the shipment
            reading_type: temperature, humidity or shock
            value: The reading (degrees C, %RH or g)
            timestamp: Reading time, defaults to now

        Returns:
            Dictionary describing the stored reading, including `is_alert`

        Raises:
            ValidationException: If the type is unknown or the value is missing
            EntityNotFoundException: If the shipment does not exist
        """
        if reading_type not in _READING_MODELS:
            raise ValidationException(
                "Invalid log type",
                {"type": [f"Must be one of: {', '.join(_READING_MODELS)}"]},
            )
        if value is None:
            raise ValidationException("Value is required", {"value": ["This field is required"]})

        model, value_field = _READING_MODELS[reading_type]
        alert = is_alert(reading_type, value)

        with self.transaction():
            shipment = self.get_or_raise(shipment_id, "Shipment")
            entry = model(**{value_field: value}, timestamp=timestamp or utcnow(), is_alert=alert)
            self.repository.add_reading(shipment, entry)
            shipment.touch()
            self.session.flush()

            if alert:
                self._queue_event(
                    EnvironmentalAlertRaised(
                        shipment_id=shipment.id,
                        shipment_number=shipment.shipment_number,
                        reading_type=reading_type,
                        value=value,
                        reading_timestamp=entry.timestamp,
                    )
                )

            result = {
                "id": entry.id,
                "type": reading_type,
                "value": value,
                "timestamp": entry.timestamp,
                "is_alert": alert,
            }

        if alert:
            logger.warning(f"Alert on shipment {shipment_id}: {reading_type}={value}")
        else:
            logger.info(f"Recorded {reading_type} reading {value} on shipment {shipment_id}")
        return result

    # --- Helpers ---

    def _apply_status_change(
        self,
        shipment: Shipment,
        new_status: str,
        new_location: Optional[str],
        notes: Optional[str],
        user_id: Optional[int],
    ) -> None:
        previous_status = shipment.status
        if self.strict_status_transitions:
            self._validate_status_transition(previous_status, new_status)

        shipment.status = new_status
        if new_location:
            shipment.current_location = new_location
        if new_status == ShipmentStatus.DELIVERED.value:
            shipment.actual_arrival = utcnow()

        self.repository.add_status_update(
            shipment,
            status=new_status,
            location=shipment.current_location,
            notes=notes or f"Status changed to {new_status}",
            updated_by_id=user_id,
        )

        battery_status = (
            BatteryStatus.AVAILABLE.value
            if new_status in _TERMINAL_STATUSES
            else BatteryStatus.IN_TRANSIT.value
        )
        moved = self.battery_repository.set_status_for_shipment(
            shipment.id, battery_status, shipment.current_location
        )
        logger.info(
            f"Shipment {shipment.id} {previous_status} -> {new_status}; "
            f"{moved} batteries set to {battery_status}"
        )

        self._queue_event(
            ShipmentStatusChanged(
                shipment_id=shipment.id,
                shipment_number=shipment.shipment_number,
                previous_status=previous_status,
                new_status=new_status,
                location=shipment.current_location,
                user_id=user_id,
            )
        )

    def _replace_batteries(self, shipment: Shipment, battery_ids: List[int], user_id: Optional[int]) -> None:
        current_ids = [b.id for b in self.battery_repository.get_by_shipment(shipment.id)]
        wanted = set(battery_ids)
        detached = [i for i in current_ids if i not in wanted]
        current = set(current_ids)
        attached = [i for i in battery_ids if i not in current]

        self.battery_repository.release(detached, shipment.current_location)
        self.battery_repository.attach_to_shipment(attached, shipment.id, shipment.current_location)

        if detached or attached:
            shipment.touch()
            logger.info(
                f"Shipment {shipment.id} batteries: attached {attached}, detached {detached}"
            )
            self._queue_event(
                ShipmentBatteriesChanged(
                    shipment_id=shipment.id,
                    attached_battery_ids=attached,
                    detached_battery_ids=detached,
                    user_id=user_id,
                )
            )

    def _ensure_batteries_exist(self, battery_ids: List[int]) -> None:
        if not battery_ids:
            return
        found = {b.id for b in self.battery_repository.get_by_ids(battery_ids)}
        missing = [i for i in battery_ids if i not in found]
        if missing:
            raise EntityNotFoundException("Battery", missing[0])

    def _ensure_assignee_exists(self, user_id: Optional[int]) -> None:
        if user_id is not None and self.user_repository.get_by_id(user_id) is None:
            raise EntityNotFoundException("User", user_id)

    def _validate_status_transition(self, current_status: str, new_status: str) -> None:
        """Validate that a status transition is allowed."""
        allowed = {
            ShipmentStatus.PREPARING.value: [
                ShipmentStatus.IN_TRANSIT.value,
                ShipmentStatus.CANCELLED.value,
            ],
            ShipmentStatus.IN_TRANSIT.value: [
                ShipmentStatus.DELAYED.value,
                ShipmentStatus.DELIVERED.value,
                ShipmentStatus.CANCELLED.value,
            ],
            ShipmentStatus.DELAYED.value: [
                ShipmentStatus.IN_TRANSIT.value,
                ShipmentStatus.DELIVERED.value,
                ShipmentStatus.CANCELLED.value,
            ],
            ShipmentStatus.DELIVERED.value: [],
            ShipmentStatus.CANCELLED.value: [],
        }

        if current_status == new_status:
            return

        if new_status not in allowed.get(current_status, []):
            logger.warning(f"Invalid transition: {current_status}->{new_status}")
            raise InvalidStatusTransitionException(
                f"Cannot transition from '{current_status}' to '{new_status}'",
                allowed.get(current_status, []),
            )
