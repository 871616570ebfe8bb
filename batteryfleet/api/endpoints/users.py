"""
User and authentication API endpoints for BatteryFleet.

Login issues a bearer token and also stores it in an http-only cookie, so
both API clients and the browser frontend can authenticate.
"""

from datetime import timedelta
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from fastapi.security import OAuth2PasswordRequestForm
import logging

from batteryfleet.api import deps
from batteryfleet.core import security
from batteryfleet.core.config import settings
from batteryfleet.core.exceptions import (
    BusinessRuleException,
    DuplicateEntityException,
    EntityNotFoundException,
)
from batteryfleet.db.models.user import User
from batteryfleet.schemas.token import Token
from batteryfleet.schemas.user import ProfileUpdate, UserCreate, UserResponse, UserUpdate
from batteryfleet.services.user_service import UserService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Token)
def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    user_service: UserService = Depends(deps.get_user_service),
) -> Any:
    """
    OAuth2 compatible login; the username field carries the email address.
    """
    user = user_service.authenticate(form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = security.create_access_token(user.id, expires_delta=expires)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=settings.PRODUCTION,
        samesite="strict",
        max_age=int(expires.total_seconds()),
    )
    return Token(
        access_token=access_token,
        token_type="bearer",
        expires_in=int(expires.total_seconds()),
        user=UserResponse.model_validate(user),
    )


@router.post("/logout")
def logout(response: Response) -> Dict[str, str]:
    """Clear the auth cookie."""
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/profile", response_model=UserResponse)
def read_profile(current_user: User = Depends(deps.get_current_active_user)) -> Any:
    return current_user


@router.put("/profile", response_model=UserResponse)
def update_profile(
    profile_in: ProfileUpdate,
    current_user: User = Depends(deps.get_current_active_user),
    user_service: UserService = Depends(deps.get_user_service),
) -> Any:
    """Update the caller's own name, email or password."""
    try:
        return user_service.update_profile(current_user, profile_in.model_dump(exclude_unset=True))
    except DuplicateEntityException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    user_in: UserCreate,
    current_user: User = Depends(deps.require_admin),
    user_service: UserService = Depends(deps.get_user_service),
) -> Any:
    """Register a new user (admin only)."""
    logger.info(f"Admin {current_user.id} registering user {user_in.email}")
    try:
        return user_service.create_user(user_in)
    except DuplicateEntityException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.get("/", response_model=List[UserResponse])
def list_users(
    current_user: User = Depends(deps.require_admin),
    user_service: UserService = Depends(deps.get_user_service),
) -> Any:
    return user_service.list_users()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int = Path(..., ge=1),
    current_user: User = Depends(deps.require_admin),
    user_service: UserService = Depends(deps.get_user_service),
) -> Any:
    try:
        return user_service.get_user(user_id)
    except EntityNotFoundException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_in: UserUpdate,
    user_id: int = Path(..., ge=1),
    current_user: User = Depends(deps.require_admin),
    user_service: UserService = Depends(deps.get_user_service),
) -> Any:
    """Update any user's details or role (admin only)."""
    try:
        return user_service.update_user(user_id, user_in.model_dump(exclude_unset=True))
    except EntityNotFoundException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    except DuplicateEntityException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.delete("/{user_id}")
def delete_user(
    user_id: int = Path(..., ge=1),
    current_user: User = Depends(deps.require_admin),
    user_service: UserService = Depends(deps.get_user_service),
) -> Dict[str, str]:
    try:
        user_service.delete_user(user_id, acting_user_id=current_user.id)
        return {"message": "User removed"}
    except EntityNotFoundException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    except BusinessRuleException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
