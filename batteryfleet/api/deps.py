# batteryfleet/api/deps.py
"""
FastAPI dependencies for BatteryFleet.

Provides dependency functions for database sessions, user authentication/authorization,
and service injection for API routes.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from batteryfleet.core import security
from batteryfleet.core.config import settings
from batteryfleet.core.events import global_event_bus
from batteryfleet.db.models.enums import ROLE_RANK, UserRole
from batteryfleet.db.models.user import User
from batteryfleet.db.session import get_db
from batteryfleet.schemas.token import TokenPayload
from batteryfleet.services.battery_service import BatteryService
from batteryfleet.services.shipment_service import ShipmentService
from batteryfleet.services.user_service import UserService

logger = logging.getLogger(__name__)

# --- Authentication ---
# auto_error is off so the session cookie can be used when no header is sent
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/users/login", auto_error=False)


def get_token(request: Request, bearer_token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """Bearer token from the Authorization header, else the auth cookie."""
    return bearer_token or request.cookies.get(settings.AUTH_COOKIE_NAME)


def get_current_user(
        db: Session = Depends(get_db), token: Optional[str] = Depends(get_token)
) -> User:
    """Get current authenticated user from JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authorized, token failed",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = security.decode_access_token(token)
        token_data = TokenPayload.model_validate(payload)
        user_id = int(token_data.sub)
    except (JWTError, ValidationError, ValueError) as e:
        logger.warning(f"Token validation failed: {e}")
        raise credentials_exception from e

    user = UserService(session=db).get_by_id(user_id)
    if user is None:
        logger.warning(f"User with ID {user_id} from token not found in DB.")
        raise credentials_exception
    return user


def get_current_active_user(
        current_user: User = Depends(get_current_user),
) -> User:
    """Gets current user and verifies they are active."""
    if not current_user.is_active:
        logger.warning(
            f"Authentication attempt by inactive user: {current_user.email} (ID: {current_user.id})"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user"
        )
    return current_user


# --- Role Checker Dependency ---
class RoleChecker:
    """
    Dependency class requiring a minimum role (operator < manager < admin).

    Usage:
        @router.post("/", dependencies=[Depends(RoleChecker(UserRole.MANAGER))])
    """

    def __init__(self, minimum_role: UserRole):
        self.minimum_role = UserRole(minimum_role).value

    def __call__(self, current_user: User = Depends(get_current_active_user)) -> User:
        if ROLE_RANK.get(current_user.role, -1) < ROLE_RANK[self.minimum_role]:
            logger.warning(
                f"Permission denied for user {current_user.id} ({current_user.role}); "
                f"requires {self.minimum_role}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not authorized as {self.minimum_role}",
            )
        return current_user


require_manager = RoleChecker(UserRole.MANAGER)
require_admin = RoleChecker(UserRole.ADMIN)


# --- Service Dependency Injectors ---

def get_battery_service(db: Session = Depends(get_db)) -> BatteryService:
    """Provides an instance of BatteryService."""
    return BatteryService(db, event_bus=global_event_bus)


def get_shipment_service(db: Session = Depends(get_db)) -> ShipmentService:
    """Provides an instance of ShipmentService."""
    return ShipmentService(db, event_bus=global_event_bus)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Provides an instance of UserService."""
    return UserService(db)
