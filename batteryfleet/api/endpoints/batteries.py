"""
Battery API endpoints for BatteryFleet.

Provides battery registration, search, partial updates, charge updates,
deletion, and the critical-health listing.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Path

from batteryfleet.api.deps import (
    get_current_active_user,
    get_battery_service,
    require_admin,
    require_manager,
)
from batteryfleet.core.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)
from batteryfleet.db.models.enums import BatteryStatus
from batteryfleet.schemas.battery import (
    BatteryChargeUpdate,
    BatteryCreate,
    BatteryDetail,
    BatteryPage,
    BatteryResponse,
    BatteryUpdate,
)
from batteryfleet.services.battery_service import BatteryService

router = APIRouter()
logger = logging.getLogger(__name__)

# Define HTTP status codes as integers
HTTP_400_BAD_REQUEST = 400
HTTP_404_NOT_FOUND = 404
HTTP_500_INTERNAL_SERVER_ERROR = 500
HTTP_201_CREATED = 201


@router.get("/", response_model=BatteryPage)
def list_batteries(
    *,
    current_user: Any = Depends(get_current_active_user),
    page_number: int = Query(1, ge=1, description="Page number, starting at 1"),
    keyword: Optional[str] = Query(None, description="Search serial number, model or manufacturer"),
    status: Optional[BatteryStatus] = Query(None, description="Filter by battery status"),
    min_health: Optional[float] = Query(None, ge=0, le=100, description="Minimum health percentage"),
    battery_service: BatteryService = Depends(get_battery_service),
) -> BatteryPage:
    """Retrieve one page of batteries, newest first."""
    logger.info(f"User {current_user.id} listing batteries page {page_number}")
    try:
        result = battery_service.list_batteries(
            page=page_number,
            keyword=keyword,
            status=status.value if status else None,
            min_health=min_health,
        )
        return BatteryPage(
            batteries=[BatteryResponse.model_validate(b) for b in result["batteries"]],
            page=result["page"],
            pages=result["pages"],
            total=result["total"],
        )
    except Exception as e:
        logger.error(f"Unexpected error listing batteries: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error retrieving batteries.")


@router.post("/", response_model=BatteryResponse, status_code=HTTP_201_CREATED)
def create_battery(
    *,
    battery_in: BatteryCreate,
    current_user: Any = Depends(require_manager),
    battery_service: BatteryService = Depends(get_battery_service),
) -> BatteryResponse:
    """Register a new battery."""
    logger.info(f"User {current_user.id} creating battery {battery_in.serial_number}")
    try:
        battery = battery_service.create_battery(battery_in.model_dump())
        return BatteryResponse.model_validate(battery)
    except (DuplicateEntityException, ValidationException) as e:
        logger.warning(f"Failed to create battery '{battery_in.serial_number}': {e.message}")
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error(f"Unexpected error creating battery '{battery_in.serial_number}': {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error creating battery.")


@router.get("/critical", response_model=List[BatteryResponse])
def list_critical_batteries(
    *,
    current_user: Any = Depends(get_current_active_user),
    battery_service: BatteryService = Depends(get_battery_service),
) -> List[BatteryResponse]:
    """Batteries below the critical health threshold, weakest first."""
    try:
        batteries = battery_service.list_critical()
        logger.info(f"Found {len(batteries)} critical batteries for user {current_user.id}")
        return [BatteryResponse.model_validate(b) for b in batteries]
    except Exception as e:
        logger.error(f"Unexpected error listing critical batteries: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error retrieving batteries.")


@router.get("/{battery_id}", response_model=BatteryDetail)
def get_battery(
    *,
    battery_id: int = Path(..., ge=1, description="Battery ID"),
    current_user: Any = Depends(get_current_active_user),
    battery_service: BatteryService = Depends(get_battery_service),
) -> BatteryDetail:
    """Get a battery with a summary of the shipment carrying it."""
    try:
        battery = battery_service.get_battery(battery_id)
        return BatteryDetail.model_validate(battery)
    except EntityNotFoundException:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Battery not found")
    except Exception as e:
        logger.error(f"Unexpected error getting battery {battery_id}: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error retrieving battery.")


@router.put("/{battery_id}", response_model=BatteryResponse)
def update_battery(
    *,
    battery_id: int = Path(..., ge=1, description="Battery ID"),
    battery_in: BatteryUpdate,
    current_user: Any = Depends(require_manager),
    battery_service: BatteryService = Depends(get_battery_service),
) -> BatteryResponse:
    """Update the fields present in the request body."""
    update_data = battery_in.model_dump(exclude_unset=True)
    logger.info(f"User {current_user.id} updating battery {battery_id}: {sorted(update_data)}")
    try:
        battery = battery_service.update_battery(battery_id, update_data)
        return BatteryResponse.model_validate(battery)
    except EntityNotFoundException:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Battery not found")
    except (DuplicateEntityException, ValidationException) as e:
        logger.warning(f"Failed to update battery {battery_id}: {e.message}")
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error(f"Unexpected error updating battery {battery_id}: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error updating battery.")


@router.delete("/{battery_id}")
def delete_battery(
    *,
    battery_id: int = Path(..., ge=1, description="Battery ID"),
    current_user: Any = Depends(require_admin),
    battery_service: BatteryService = Depends(get_battery_service),
) -> Dict[str, str]:
    """Delete a battery, removing it from its shipment."""
    logger.info(f"User {current_user.id} deleting battery {battery_id}")
    try:
        battery_service.delete_battery(battery_id)
        return {"message": "Battery removed"}
    except EntityNotFoundException:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Battery not found")
    except Exception as e:
        logger.error(f"Unexpected error deleting battery {battery_id}: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error deleting battery.")


@router.put("/{battery_id}/charge", response_model=BatteryResponse)
def update_battery_charge(
    *,
    battery_id: int = Path(..., ge=1, description="Battery ID"),
    charge_in: BatteryChargeUpdate,
    current_user: Any = Depends(get_current_active_user),
    battery_service: BatteryService = Depends(get_battery_service),
) -> BatteryResponse:
    """Set a battery's state of charge."""
    logger.info(f"User {current_user.id} setting charge of battery {battery_id} to {charge_in.current_charge}")
    try:
        battery = battery_service.update_charge(battery_id, charge_in.current_charge)
        return BatteryResponse.model_validate(battery)
    except ValidationException as e:
        logger.warning(f"Invalid charge for battery {battery_id}: {e.message}")
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=e.message)
    except EntityNotFoundException:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Battery not found")
    except Exception as e:
        logger.error(f"Unexpected error updating charge of battery {battery_id}: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error updating battery charge.")
