# File: batteryfleet/db/models/battery.py
"""
Battery model for the BatteryFleet system.

A battery is identified by its serial number and belongs to at most one
shipment at a time.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Column, String, Float, Integer, ForeignKey, DateTime, Date, Text
from sqlalchemy.orm import relationship, validates

from batteryfleet.db.models.base import (
    AbstractBase,
    TimestampMixin,
    PercentageValidationMixin,
    ModelValidationError,
    utcnow,
)
from batteryfleet.db.models.enums import BatteryStatus, CapacityUnit


class Battery(AbstractBase, TimestampMixin, PercentageValidationMixin):
    """
    Battery tracked by the fleet.

    Attributes:
        serial_number: Unique manufacturer serial number
        status: Operational status (see BatteryStatus)
        health_status: State of health, percent (0-100)
        current_charge: State of charge, percent (0-100)
        shipment_id: Shipment currently carrying the battery, if any
    """

    __tablename__ = "batteries"

    serial_number = Column(String(100), unique=True, index=True, nullable=False)
    model = Column(String(255), nullable=False)
    manufacturer = Column(String(255), nullable=False)
    capacity = Column(Float, nullable=False)
    capacity_unit = Column(String(10), default=CapacityUnit.WATT_HOURS.value, nullable=False)
    voltage = Column(Float, nullable=False)
    chemistry = Column(String(50), nullable=False)
    manufacture_date = Column(Date, nullable=False)
    notes = Column(Text)

    status = Column(String(50), default=BatteryStatus.AVAILABLE.value, nullable=False, index=True)
    health_status = Column(Float, default=100, nullable=False)
    current_charge = Column(Float, default=100, nullable=False)
    cycle_count = Column(Integer, default=0, nullable=False)
    location = Column(String(255), default="Warehouse", nullable=False)
    last_checked_date = Column(DateTime, default=utcnow)

    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    shipment = relationship("Shipment", back_populates="batteries")

    @validates("health_status", "current_charge")
    def validate_percentage(self, key: str, value: float) -> float:
        return self._check_percentage(key, value)

    @validates("cycle_count")
    def validate_cycle_count(self, key: str, value: int) -> int:
        if value is not None and value < 0:
            raise ModelValidationError(self, key, "cannot be negative")
        return value

    @property
    def age(self) -> Optional[int]:
        """Whole years since manufacture."""
        if not self.manufacture_date:
            return None
        manufactured = self.manufacture_date
        if not isinstance(manufactured, date):
            return None
        return (date.today() - manufactured).days // 365

    def __repr__(self) -> str:
        return (
            f"<Battery(id={self.id}, serial_number='{self.serial_number}', "
            f"status='{self.status}', shipment_id={self.shipment_id})>"
        )
