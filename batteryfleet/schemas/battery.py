# File: batteryfleet/schemas/battery.py
"""
Battery schemas for the BatteryFleet API.

Request models use enum values directly so validated payloads can be
written to the string columns of the Battery model.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from batteryfleet.db.models.enums import BatteryChemistry, BatteryStatus, CapacityUnit


def _strip_serial_number(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Serial number cannot be blank")
    return v


class BatteryBase(BaseModel):
    serial_number: str = Field(..., min_length=1, max_length=100, description="Manufacturer serial number")
    model: str = Field(..., min_length=1, description="Battery model")
    manufacturer: str = Field(..., min_length=1, description="Manufacturer name")
    capacity: float = Field(..., gt=0, description="Rated capacity")
    capacity_unit: CapacityUnit = Field(CapacityUnit.WATT_HOURS, description="Unit of capacity")
    voltage: float = Field(..., gt=0, description="Nominal voltage")
    chemistry: BatteryChemistry = Field(..., description="Cell chemistry")
    manufacture_date: date = Field(..., description="Date of manufacture (YYYY-MM-DD)")
    notes: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True, protected_namespaces=())

    @field_validator("serial_number")
    @classmethod
    def strip_serial_number(cls, v: str) -> str:
        return _strip_serial_number(v)


class BatteryCreate(BatteryBase):
    status: BatteryStatus = Field(BatteryStatus.AVAILABLE, description="Operational status")
    health_status: float = Field(100, ge=0, le=100, description="State of health, percent")
    current_charge: float = Field(100, ge=0, le=100, description="State of charge, percent")
    cycle_count: int = Field(0, ge=0, description="Charge cycles completed")
    location: str = Field("Warehouse", description="Current storage location")


class BatteryUpdate(BaseModel):
    """
    Partial battery update. Only fields present in the request body are
    applied; an explicit null for a required field is rejected by the service.
    """

    serial_number: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, min_length=1)
    manufacturer: Optional[str] = Field(None, min_length=1)
    capacity: Optional[float] = Field(None, gt=0)
    capacity_unit: Optional[CapacityUnit] = None
    voltage: Optional[float] = Field(None, gt=0)
    chemistry: Optional[BatteryChemistry] = None
    manufacture_date: Optional[date] = None
    notes: Optional[str] = None
    status: Optional[BatteryStatus] = None
    health_status: Optional[float] = Field(None, ge=0, le=100)
    current_charge: Optional[float] = Field(None, ge=0, le=100)
    cycle_count: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True, protected_namespaces=())

    @field_validator("serial_number")
    @classmethod
    def strip_serial_number(cls, v: Optional[str]) -> Optional[str]:
        return _strip_serial_number(v)


class BatteryChargeUpdate(BaseModel):
    # Range is checked by the service so a bad value is a 400, like a missing one
    current_charge: Optional[float] = Field(None, description="New state of charge, percent")


class ShipmentSummary(BaseModel):
    id: int
    shipment_number: str
    status: str

    model_config = ConfigDict(from_attributes=True)


class BatteryResponse(BaseModel):
    id: int
    serial_number: str
    model: str
    manufacturer: str
    capacity: float
    capacity_unit: str
    voltage: float
    chemistry: str
    manufacture_date: date
    notes: Optional[str] = None
    status: str
    health_status: float
    current_charge: float
    cycle_count: int
    location: str
    last_checked_date: Optional[datetime] = None
    shipment_id: Optional[int] = None
    age: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class BatteryDetail(BatteryResponse):
    shipment: Optional[ShipmentSummary] = None


class BatteryPage(BaseModel):
    batteries: List[BatteryResponse]
    page: int
    pages: int
    total: int
