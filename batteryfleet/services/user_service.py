# File: batteryfleet/services/user_service.py
"""
User service for BatteryFleet: accounts, credentials and roles.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from batteryfleet.core.exceptions import (
    BusinessRuleException,
    DuplicateEntityException,
)
from batteryfleet.core.security import get_password_hash, verify_password
from batteryfleet.db.models.user import User
from batteryfleet.repositories.user_repository import UserRepository
from batteryfleet.schemas.user import UserCreate
from batteryfleet.services.base_service import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService[User]):
    """
    Service for managing users.
    """

    def __init__(self, session: Session, repository: Optional[UserRepository] = None, event_bus=None):
        super().__init__(session, repository=repository or UserRepository(session), event_bus=event_bus)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.repository.get_by_email(email)

    def get_user(self, user_id: int) -> User:
        return self.get_or_raise(user_id, "User")

    def list_users(self) -> List[User]:
        return self.repository.list_all()

    def create_user(self, user_in: UserCreate) -> User:
        """
        Creates a new user, hashing the password.

        Args:
            user_in: User creation schema containing user details and plain password.

        Returns:
            The created User object.

        Raises:
            DuplicateEntityException: If a user with the same email already exists.
        """
        logger.info(f"Attempting to create user with email: {user_in.email}")

        with self.transaction():
            if self.get_by_email(user_in.email):
                logger.warning(f"Attempted to create duplicate user: {user_in.email}")
                raise DuplicateEntityException(
                    "User already exists", details={"email": user_in.email}
                )

            user_data = user_in.model_dump(exclude={"password"})
            user_data["email"] = user_data["email"].lower()
            user_data["hashed_password"] = get_password_hash(user_in.password)
            user_data["is_active"] = True
            user = self.repository.create(user_data)

        logger.info(f"Created user {user.email} (ID: {user.id}, role: {user.role})")
        return user

    def update_user(self, user_id: int, data: Dict[str, Any]) -> User:
        """
        Updates an existing user. A `password` key is hashed before storing.

        Args:
            user_id: The ID of the user to update.
            data: Fields to update (already limited to those the caller sent).

        Raises:
            EntityNotFoundException: If the user does not exist.
            DuplicateEntityException: If the new email belongs to another user.
        """
        data = {k: v for k, v in data.items() if v is not None}

        with self.transaction():
            user = self.get_or_raise(user_id, "User")

            new_email = data.get("email")
            if new_email:
                new_email = new_email.lower()
                existing = self.get_by_email(new_email)
                if existing and existing.id != user.id:
                    raise DuplicateEntityException(
                        "Email is already in use", details={"email": new_email}
                    )
                data["email"] = new_email

            new_password = data.pop("password", None)
            if new_password:
                logger.info(f"Updating password for user ID: {user_id}")
                data["hashed_password"] = get_password_hash(new_password)

            self.repository.update(user, data)

        logger.info(f"Updated user ID: {user_id}")
        return user

    def update_profile(self, user: User, data: Dict[str, Any]) -> User:
        """Let a user change their own name, email or password; never their role."""
        allowed = {k: v for k, v in data.items() if k in ("name", "email", "password")}
        return self.update_user(user.id, allowed)

    def delete_user(self, user_id: int, acting_user_id: Optional[int] = None) -> None:
        """
        Deletes a user by ID.

        Raises:
            EntityNotFoundException: If the user does not exist.
            BusinessRuleException: If a user tries to delete their own account.
        """
        if acting_user_id is not None and acting_user_id == user_id:
            raise BusinessRuleException("You cannot delete your own account", rule_name="SELF_DELETE")

        with self.transaction():
            user = self.get_or_raise(user_id, "User")
            self.repository.delete(user)

        logger.info(f"Deleted user ID: {user_id}")

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user with email and password.

        Returns:
            User object if authentication successful, None otherwise.
        """
        user = self.get_by_email(email)
        if not user:
            logger.info(f"Authentication failed: No user found with email: {email}")
            return None

        if not user.is_active:
            logger.warning(f"Authentication failed: User {user.email} is inactive")
            return None

        if not verify_password(password, user.hashed_password):
            logger.warning(f"Authentication failed: Invalid password attempt for user {user.email}")
            return None

        logger.info(f"Authentication successful for user {user.email} (ID={user.id})")
        return user
