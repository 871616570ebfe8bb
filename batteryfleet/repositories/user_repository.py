# File: batteryfleet/repositories/user_repository.py
"""
Repository implementation for users in BatteryFleet.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from batteryfleet.db.models.user import User
from batteryfleet.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user entities, extending BaseRepository with user-specific methods.
    """

    def __init__(self, session: Session):
        super().__init__(session=session, model=User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Look up a user by email, ignoring case."""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> List[User]:
        stmt = select(User).order_by(User.id)
        return list(self.session.execute(stmt).scalars().all())
