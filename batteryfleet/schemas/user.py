# File: batteryfleet/schemas/user.py
"""
User schemas for the BatteryFleet API.

This module contains Pydantic models for user management,
including registration, profile updates, and login responses.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator

from batteryfleet.core.config import settings
from batteryfleet.db.models.enums import UserRole


def _check_password_length(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) < settings.MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )
    return v


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr = Field(..., description="Login email address")


class UserCreate(UserBase):
    """Schema for registering a new user."""

    password: str = Field(..., description="Plain text password")
    role: UserRole = Field(UserRole.OPERATOR, description="Access role")

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_length(v)


class UserUpdate(BaseModel):
    """Schema for administrative user updates."""

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        return _check_password_length(v)


class ProfileUpdate(BaseModel):
    """Schema for users editing their own profile; role is not editable here."""

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        return _check_password_length(v)


class UserResponse(BaseModel):
    """Schema for user information."""

    id: int
    name: str
    email: EmailStr
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
