# File: batteryfleet/core/config.py
"""
Configuration settings for BatteryFleet.

This module defines application settings using Pydantic's BaseSettings,
which supports environment variable loading and validation.
"""

import json
import secrets
from typing import Annotated, List, Union

from pydantic import AnyHttpUrl, EmailStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Values can also come from a `.env` file next to the working directory.
    """

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

    # API settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "BatteryFleet"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    PRODUCTION: bool = False

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30  # 30 days
    AUTH_COOKIE_NAME: str = "jwt"
    MIN_PASSWORD_LENGTH: int = 6

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[Union[AnyHttpUrl, str]], NoDecode] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS origins given as a JSON list or a comma-separated string."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                return [i.strip() for i in v.split(",") if i.strip()]
        return v or []

    # Database
    DATABASE_URL: str = "sqlite:///./batteryfleet.db"
    DB_ECHO: bool = False

    # Fleet rules
    PAGE_SIZE: int = 10
    CRITICAL_HEALTH_THRESHOLD: float = 30
    STRICT_STATUS_TRANSITIONS: bool = False

    @field_validator("PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        return max(1, v)

    # First admin account
    FIRST_ADMIN_EMAIL: EmailStr = "admin@batteryfleet.io"
    FIRST_ADMIN_PASSWORD: str = "changeme"
    FIRST_ADMIN_NAME: str = "Fleet Administrator"


# Create settings instance
settings = Settings()
