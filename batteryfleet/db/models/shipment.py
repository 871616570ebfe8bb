# File: batteryfleet/db/models/shipment.py
"""
Shipment model for the BatteryFleet system.

This module defines the Shipment model representing battery consignments
moving between sites, along with the append-only history owned by a
shipment: status updates and environmental readings.
"""

from typing import Optional

from sqlalchemy import Column, String, Float, Integer, ForeignKey, DateTime, Boolean, Text
from sqlalchemy.orm import relationship, validates

from batteryfleet.db.models.base import AbstractBase, TimestampMixin, ModelValidationError, utcnow
from batteryfleet.db.models.enums import ShipmentStatus


class Shipment(AbstractBase, TimestampMixin):
    """
    Shipment of batteries from an origin to a destination.

    Member batteries are the batteries whose `shipment_id` points here.

    Attributes:
        shipment_number: Unique human-facing shipment identifier
        status: Current shipment status (see ShipmentStatus)
        current_location: Last reported location, initially the origin
        actual_arrival: Set when the shipment is delivered
        assigned_to_id: User responsible for the shipment
    """

    __tablename__ = "shipments"

    shipment_number = Column(String(100), unique=True, index=True, nullable=False)
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    carrier = Column(String(255), nullable=False)
    tracking_number = Column(String(100))

    departure_date = Column(DateTime)
    estimated_arrival = Column(DateTime)
    actual_arrival = Column(DateTime)

    status = Column(String(50), default=ShipmentStatus.PREPARING.value, nullable=False, index=True)
    current_location = Column(String(255))

    hazard_class = Column(String(50), default="Class 9", nullable=False)
    special_instructions = Column(Text)
    customs_information = Column(Text)

    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    batteries = relationship("Battery", back_populates="shipment", order_by="Battery.id")
    status_updates = relationship(
        "ShipmentStatusUpdate",
        back_populates="shipment",
        cascade="all, delete-orphan",
        order_by="ShipmentStatusUpdate.id",
    )
    temperature_logs = relationship(
        "TemperatureLog",
        back_populates="shipment",
        cascade="all, delete-orphan",
        order_by="TemperatureLog.id",
    )
    humidity_logs = relationship(
        "HumidityLog",
        back_populates="shipment",
        cascade="all, delete-orphan",
        order_by="HumidityLog.id",
    )
    shock_events = relationship(
        "ShockEvent",
        back_populates="shipment",
        cascade="all, delete-orphan",
        order_by="ShockEvent.id",
    )

    @property
    def battery_count(self) -> int:
        return len(self.batteries)

    @property
    def duration_days(self) -> Optional[int]:
        """Planned duration in whole days, when both dates are known."""
        if not self.departure_date or not self.estimated_arrival:
            return None
        return (self.estimated_arrival - self.departure_date).days

    def __repr__(self) -> str:
        return (
            f"<Shipment(id={self.id}, shipment_number='{self.shipment_number}', "
            f"status='{self.status}')>"
        )


class ShipmentStatusUpdate(AbstractBase):
    """One entry in a shipment's status history."""

    __tablename__ = "shipment_status_updates"

    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(50), nullable=False)
    location = Column(String(255))
    notes = Column(Text)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    shipment = relationship("Shipment", back_populates="status_updates")
    updated_by = relationship("User")

    def __repr__(self) -> str:
        return f"<ShipmentStatusUpdate(shipment_id={self.shipment_id}, status='{self.status}')>"


class TemperatureLog(AbstractBase):
    __tablename__ = "temperature_logs"

    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Float, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    is_alert = Column(Boolean, default=False, nullable=False)

    shipment = relationship("Shipment", back_populates="temperature_logs")


class HumidityLog(AbstractBase):
    __tablename__ = "humidity_logs"

    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Float, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    is_alert = Column(Boolean, default=False, nullable=False)

    shipment = relationship("Shipment", back_populates="humidity_logs")


class ShockEvent(AbstractBase):
    """Shock reading in g."""

    __tablename__ = "shock_events"

    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    magnitude = Column(Float, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    is_alert = Column(Boolean, default=False, nullable=False)

    shipment = relationship("Shipment", back_populates="shock_events")

    @validates("magnitude")
    def validate_magnitude(self, key: str, magnitude: float) -> float:
        if magnitude is None:
            raise ModelValidationError(self, key, "is required")
        return magnitude
