"""
Authentication token schemas for the BatteryFleet API.
"""

from typing import Optional
from pydantic import BaseModel, Field

from batteryfleet.schemas.user import UserResponse


class Token(BaseModel):
    """
    Schema for access token response.

    Contains the token value and type for OAuth2-compatible responses,
    plus the authenticated user.
    """

    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: Optional[UserResponse] = None


class TokenPayload(BaseModel):
    """Schema for the contents of JWT token payload."""

    sub: str = Field(..., description="Subject identifier (user ID)")
    exp: int = Field(..., description="Token expiration timestamp")
    type: Optional[str] = Field(None, description="Token type")
