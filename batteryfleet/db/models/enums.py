# File: batteryfleet/db/models/enums.py
"""
Enumerations shared by the BatteryFleet models and schemas.

Values are stored as plain strings in the database.
"""

from enum import Enum


class BatteryStatus(str, Enum):
    AVAILABLE = "Available"
    IN_TRANSIT = "In Transit"
    INSTALLED = "Installed"
    MAINTENANCE = "Maintenance"
    DEFECTIVE = "Defective"


class BatteryChemistry(str, Enum):
    LITHIUM_ION = "Li-ion"
    LITHIUM_IRON_PHOSPHATE = "LiFePO4"
    LEAD_ACID = "Lead-Acid"
    NICKEL_METAL_HYDRIDE = "NiMH"
    NICKEL_CADMIUM = "NiCd"
    OTHER = "Other"


class CapacityUnit(str, Enum):
    MILLIAMP_HOURS = "mAh"
    WATT_HOURS = "Wh"


class ShipmentStatus(str, Enum):
    PREPARING = "Preparing"
    IN_TRANSIT = "In Transit"
    DELAYED = "Delayed"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class ReadingType(str, Enum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    SHOCK = "shock"


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    OPERATOR = "operator"


# Shipment statuses during which environmental alerts are still actionable
ACTIVE_SHIPMENT_STATUSES = (
    ShipmentStatus.PREPARING.value,
    ShipmentStatus.IN_TRANSIT.value,
    ShipmentStatus.DELAYED.value,
)

# Role precedence, lowest first
ROLE_RANK = {
    UserRole.OPERATOR.value: 0,
    UserRole.MANAGER.value: 1,
    UserRole.ADMIN.value: 2,
}
