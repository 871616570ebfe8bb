# File: batteryfleet/db/models/base.py
"""
Base models and mixins for the BatteryFleet system.

This module provides the foundation for all database models in the system:
- Base SQLAlchemy model class
- Common mixins for shared functionality (timestamps, range validation)
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, Integer, DateTime, MetaData
from sqlalchemy.orm import declarative_base

# Create the SQLAlchemy base
Base = declarative_base(metadata=MetaData())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ModelValidationError(ValueError):
    """
    Exception raised for model validation errors.

    Attributes:
        model: The model instance that failed validation
        field: The field that failed validation
        message: Explanation of the error
    """

    def __init__(self, model: Any, field: str, message: str):
        self.model = model
        self.field = field
        self.message = message
        super().__init__(
            f"Validation error in {model.__class__.__name__}.{field}: {message}"
        )


class PercentageValidationMixin:
    """
    Mixin for models that carry 0-100 percentage columns.

    Subclasses call `_check_percentage` from their `@validates` hooks.
    """

    def _check_percentage(self, key: str, value: Any) -> Any:
        if value is not None and not 0 <= value <= 100:
            raise ModelValidationError(self, key, "must be between 0 and 100")
        return value


class TimestampMixin:
    """
    Mixin providing automatic timestamp functionality.

    Adds created_at and updated_at timestamps that are automatically
    maintained when records are created or updated.
    """

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def touch(self) -> None:
        """Mark the record as modified even if no own column changed."""
        self.updated_at = utcnow()


class AbstractBase(Base):
    """
    Abstract base class for all model entities.

    Attributes:
        id: Primary key ID (auto-incremented)
    """

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
