# File: batteryfleet/schemas/__init__.py
"""
Schemas package for the BatteryFleet API.

This module exports Pydantic models used for request validation and
response serialization.
"""

from .battery import (
    BatteryCreate,
    BatteryUpdate,
    BatteryChargeUpdate,
    BatteryResponse,
    BatteryDetail,
    BatteryPage,
)
from .shipment import (
    ShipmentCreate,
    ShipmentUpdate,
    ShipmentResponse,
    ShipmentDetail,
    ShipmentPage,
    ShipmentAlertSummary,
    EnvironmentalLogCreate,
    EnvironmentalLogResponse,
    EnvironmentalReading,
)
from .user import UserCreate, UserUpdate, ProfileUpdate, UserResponse
from .token import Token, TokenPayload

__all__ = [
    # Batteries
    'BatteryCreate', 'BatteryUpdate', 'BatteryChargeUpdate',
    'BatteryResponse', 'BatteryDetail', 'BatteryPage',

    # Shipments
    'ShipmentCreate', 'ShipmentUpdate', 'ShipmentResponse', 'ShipmentDetail',
    'ShipmentPage', 'ShipmentAlertSummary',
    'EnvironmentalLogCreate', 'EnvironmentalLogResponse', 'EnvironmentalReading',

    # Users and authentication
    'UserCreate', 'UserUpdate', 'ProfileUpdate', 'UserResponse',
    'Token', 'TokenPayload',
]
