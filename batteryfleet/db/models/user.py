# File: batteryfleet/db/models/user.py

from sqlalchemy import Boolean, Column, String

from batteryfleet.db.models.base import AbstractBase, TimestampMixin
from batteryfleet.db.models.enums import UserRole, ROLE_RANK


class User(AbstractBase, TimestampMixin):
    """
    User model for authentication and authorization in the BatteryFleet system.

    Stores account information, credentials, and the role used for access checks.
    """

    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), default=UserRole.OPERATOR.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def has_role(self, minimum_role: str) -> bool:
        """True when this user's role is at least `minimum_role`."""
        return ROLE_RANK.get(self.role, -1) >= ROLE_RANK[minimum_role]

    def __repr__(self):
        return f"User(id={self.id}, email={self.email}, role={self.role})"
