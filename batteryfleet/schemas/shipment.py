# File: batteryfleet/schemas/shipment.py
"""
Shipment schemas for the BatteryFleet API.

This module contains Pydantic models for shipments, their status history,
environmental readings, and the active-alert summary.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from batteryfleet.db.models.enums import ShipmentStatus


def _strip_shipment_number(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Shipment number cannot be blank")
    return v


class ShipmentBase(BaseModel):
    shipment_number: str = Field(..., min_length=1, max_length=100, description="Unique shipment number")
    origin: str = Field(..., min_length=1, description="Origin site")
    destination: str = Field(..., min_length=1, description="Destination site")
    carrier: str = Field(..., min_length=1, description="Carrier name")
    tracking_number: Optional[str] = Field(None, description="Carrier tracking number")
    departure_date: Optional[datetime] = None
    estimated_arrival: Optional[datetime] = None
    hazard_class: str = Field("Class 9", description="Dangerous goods class")
    special_instructions: Optional[str] = None
    customs_information: Optional[str] = None
    assigned_to_id: Optional[int] = Field(None, description="ID of the responsible user")

    @field_validator("shipment_number")
    @classmethod
    def strip_shipment_number(cls, v: str) -> str:
        return _strip_shipment_number(v)


class ShipmentCreate(ShipmentBase):
    batteries: List[int] = Field(default_factory=list, description="IDs of batteries to load")

    @field_validator("batteries")
    @classmethod
    def dedupe_batteries(cls, v: List[int]) -> List[int]:
        return list(dict.fromkeys(v))


class ShipmentUpdate(BaseModel):
    """
    Partial shipment update.

    `current_location` and `status_notes` only take effect together with a
    status change. `batteries`, when present, replaces the membership.
    """

    shipment_number: Optional[str] = Field(None, max_length=100)
    origin: Optional[str] = Field(None, min_length=1)
    destination: Optional[str] = Field(None, min_length=1)
    carrier: Optional[str] = Field(None, min_length=1)
    tracking_number: Optional[str] = None
    departure_date: Optional[datetime] = None
    estimated_arrival: Optional[datetime] = None
    hazard_class: Optional[str] = Field(None, min_length=1)
    special_instructions: Optional[str] = None
    customs_information: Optional[str] = None
    assigned_to_id: Optional[int] = None
    status: Optional[ShipmentStatus] = None
    current_location: Optional[str] = None
    status_notes: Optional[str] = None
    batteries: Optional[List[int]] = None

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("shipment_number")
    @classmethod
    def strip_shipment_number(cls, v: Optional[str]) -> Optional[str]:
        return _strip_shipment_number(v)

    @field_validator("batteries")
    @classmethod
    def dedupe_batteries(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        return list(dict.fromkeys(v))


# --- Nested response pieces ---

class UserSummary(BaseModel):
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class BatterySummary(BaseModel):
    id: int
    serial_number: str
    model: str
    status: str
    health_status: float
    current_charge: float

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class StatusUpdateResponse(BaseModel):
    id: int
    status: str
    location: Optional[str] = None
    notes: Optional[str] = None
    timestamp: datetime
    updated_by: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ReadingLogResponse(BaseModel):
    """Temperature or humidity entry."""

    id: int
    value: float
    timestamp: datetime
    is_alert: bool

    model_config = ConfigDict(from_attributes=True)


class ShockEventResponse(BaseModel):
    id: int
    magnitude: float
    timestamp: datetime
    is_alert: bool

    model_config = ConfigDict(from_attributes=True)


# --- Shipment responses ---

class ShipmentResponse(BaseModel):
    id: int
    shipment_number: str
    origin: str
    destination: str
    carrier: str
    tracking_number: Optional[str] = None
    departure_date: Optional[datetime] = None
    estimated_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    status: str
    current_location: Optional[str] = None
    hazard_class: str
    special_instructions: Optional[str] = None
    customs_information: Optional[str] = None
    assigned_to_id: Optional[int] = None
    battery_count: int = 0
    duration_days: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ShipmentDetail(ShipmentResponse):
    batteries: List[BatterySummary] = []
    assigned_to: Optional[UserSummary] = None
    status_updates: List[StatusUpdateResponse] = []
    temperature_logs: List[ReadingLogResponse] = []
    humidity_logs: List[ReadingLogResponse] = []
    shock_events: List[ShockEventResponse] = []


class ShipmentPage(BaseModel):
    shipments: List[ShipmentResponse]
    page: int
    pages: int
    total: int


class ShipmentAlertSummary(BaseModel):
    id: int
    shipment_number: str
    status: str
    current_location: Optional[str] = None
    carrier: str
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Environmental readings ---

class EnvironmentalLogCreate(BaseModel):
    # Type and value are checked by the service so bad input is a 400
    type: Optional[str] = Field(None, description="temperature, humidity or shock")
    value: Optional[float] = Field(None, description="Reading value (degrees C, %RH or g)")
    timestamp: Optional[datetime] = Field(None, description="Reading time, defaults to now")


class EnvironmentalReading(BaseModel):
    id: int
    type: str
    value: float
    timestamp: datetime
    is_alert: bool


class EnvironmentalLogResponse(BaseModel):
    message: str
    log: EnvironmentalReading
    is_alert: bool
