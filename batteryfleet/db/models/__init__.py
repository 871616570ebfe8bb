"""
Initializes the models package for SQLAlchemy declarative base.

Importing this package registers every table on `Base.metadata`, so
`Base.metadata.create_all()` sees the full schema.
"""

from batteryfleet.db.models.base import Base

from batteryfleet.db.models.enums import (
    BatteryStatus,
    BatteryChemistry,
    CapacityUnit,
    ShipmentStatus,
    ReadingType,
    UserRole,
)

from batteryfleet.db.models.user import User
from batteryfleet.db.models.battery import Battery
from batteryfleet.db.models.shipment import (
    Shipment,
    ShipmentStatusUpdate,
    TemperatureLog,
    HumidityLog,
    ShockEvent,
)

__all__ = [
    "Base",
    "BatteryStatus",
    "BatteryChemistry",
    "CapacityUnit",
    "ShipmentStatus",
    "ReadingType",
    "UserRole",
    "User",
    "Battery",
    "Shipment",
    "ShipmentStatusUpdate",
    "TemperatureLog",
    "HumidityLog",
    "ShockEvent",
]
