"""
Shipment API endpoints for BatteryFleet.

Provides shipment creation, search, updates with status cascades,
deletion, environmental readings, and the active-alert listing.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Path

from batteryfleet.api.deps import (
    get_current_active_user,
    get_shipment_service,
    require_admin,
    require_manager,
)
from batteryfleet.core.exceptions import (
    BusinessRuleException,
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)
from batteryfleet.db.models.enums import ShipmentStatus
from batteryfleet.schemas.shipment import (
    EnvironmentalLogCreate,
    EnvironmentalLogResponse,
    EnvironmentalReading,
    ShipmentAlertSummary,
    ShipmentCreate,
    ShipmentDetail,
    ShipmentPage,
    ShipmentResponse,
    ShipmentUpdate,
)
from batteryfleet.services.shipment_service import ShipmentService

router = APIRouter()
logger = logging.getLogger(__name__)

# Define HTTP status codes as integers
HTTP_400_BAD_REQUEST = 400
HTTP_404_NOT_FOUND = 404
HTTP_500_INTERNAL_SERVER_ERROR = 500
HTTP_201_CREATED = 201


@router.get("/", response_model=ShipmentPage)
def list_shipments(
    *,
    current_user: Any = Depends(get_current_active_user),
    page_number: int = Query(1, ge=1, description="Page number, starting at 1"),
    keyword: Optional[str] = Query(None, description="Search number, origin, destination or carrier"),
    status: Optional[ShipmentStatus] = Query(None, description="Filter by shipment status"),
    shipment_service: ShipmentService = Depends(get_shipment_service),
) -> ShipmentPage:
    """Retrieve one page of shipments, newest first."""
    logger.info(f"User {current_user.id} listing shipments page {page_number}")
    try:
        result = shipment_service.list_shipments(
            page=page_number,
            keyword=keyword,
            status=status.value if status else None,
        )
        return ShipmentPage(
            shipments=[ShipmentResponse.model_validate(s) for s in result["shipments"]],
            page=result["page"],
            pages=result["pages"],
            total=result["total"],
        )
    except Exception as e:
        logger.error(f"Unexpected error listing shipments: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error retrieving shipments.")


@router.post("/", response_model=ShipmentDetail, status_code=HTTP_201_CREATED)
def create_shipment(
    *,
    shipment_in: ShipmentCreate,
    current_user: Any = Depends(require_manager),
    shipment_service: ShipmentService = Depends(get_shipment_service),
) -> ShipmentDetail:
    """Create a shipment and load the listed batteries onto it."""
    logger.info(f"User {current_user.id} creating shipment {shipment_in.shipment_number}")
    try:
        shipment = shipment_service.create_shipment(shipment_in.model_dump(), user_id=current_user.id)
        return ShipmentDetail.model_validate(shipment)
    except EntityNotFoundException as e:
        logger.warning(f"Failed to create shipment '{shipment_in.shipment_number}': {e.message}")
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=e.message)
    except (DuplicateEntityException, ValidationException) as e:
        logger.warning(f"Failed to create shipment '{shipment_in.shipment_number}': {e.message}")
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error(f"Unexpected error creating shipment '{shipment_in.shipment_number}': {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error creating shipment.")


@router.get("/alerts", response_model=List[ShipmentAlertSummary])
def list_shipments_with_alerts(
    *,
    current_user: Any = Depends(get_current_active_user),
    shipment_service: ShipmentService = Depends(get_shipment_service),
) -> List[ShipmentAlertSummary]:
    """Active shipments with at least one environmental alert, most recently modified first."""
    try:
        shipments = shipment_service.list_with_active_alerts()
        logger.info(f"Found {len(shipments)} shipments with active alerts for user {current_user.id}")
        return [ShipmentAlertSummary.model_validate(s) for s in shipments]
    except Exception as e:
        logger.error(f"Unexpected error listing shipment alerts: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error retrieving alerts.")


@router.get("/{shipment_id}", response_model=ShipmentDetail)
def get_shipment(
    *,
    shipment_id: int = Path(..., ge=1, description="Shipment ID"),
    current_user: Any = Depends(get_current_active_user),
    shipment_service: ShipmentService = Depends(get_shipment_service),
) -> ShipmentDetail:
    """Get a shipment with its batteries, assignee, status history and readings."""
    try:
        shipment = shipment_service.get_shipment(shipment_id)
        return ShipmentDetail.model_validate(shipment)
    except EntityNotFoundException:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Shipment not found")
    except Exception as e:
        logger.error(f"Unexpected error getting shipment {shipment_id}: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error retrieving shipment.")


@router.put("/{shipment_id}", response_model=ShipmentDetail)
def update_shipment(
    *,
    shipment_id: int = Path(..., ge=1, description="Shipment ID"),
    shipment_in: ShipmentUpdate,
    current_user: Any = Depends(require_manager),
    shipment_service: ShipmentService = Depends(get_shipment_service),
) -> ShipmentDetail:
    """
    Update a shipment.

    Changing `status` moves every member battery along with the shipment;
    sending `batteries` replaces the membership.
    """
    update_data = shipment_in.model_dump(exclude_unset=True)
    logger.info(f"User {current_user.id} updating shipment {shipment_id}: {sorted(update_data)}")
    try:
        shipment = shipment_service.update_shipment(shipment_id, update_data, user_id=current_user.id)
        return ShipmentDetail.model_validate(shipment)
    except EntityNotFoundException as e:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=e.message)
    except (DuplicateEntityException, ValidationException, BusinessRuleException) as e:
        logger.warning(f"Failed to update shipment {shipment_id}: {e.message}")
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error(f"Unexpected error updating shipment {shipment_id}: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error updating shipment.")


@router.delete("/{shipment_id}")
def delete_shipment(
    *,
    shipment_id: int = Path(..., ge=1, description="Shipment ID"),
    current_user: Any = Depends(require_admin),
    shipment_service: ShipmentService = Depends(get_shipment_service),
) -> Dict[str, str]:
    """Delete a shipment, returning its batteries to available."""
    logger.info(f"User {current_user.id} deleting shipment {shipment_id}")
    try:
        shipment_service.delete_shipment(shipment_id)
        return {"message": "Shipment removed"}
    except EntityNotFoundException:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Shipment not found")
    except Exception as e:
        logger.error(f"Unexpected error deleting shipment {shipment_id}: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error deleting shipment.")


@router.post("/{shipment_id}/logs", response_model=EnvironmentalLogResponse, status_code=HTTP_201_CREATED)
def add_environmental_log(
    *,
    shipment_id: int = Path(..., ge=1, description="Shipment ID"),
    log_in: EnvironmentalLogCreate,
    current_user: Any = Depends(get_current_active_user),
    shipment_service: ShipmentService = Depends(get_shipment_service),
) -> EnvironmentalLogResponse:
    """Record a temperature, humidity or shock reading on a shipment."""
    logger.info(f"User {current_user.id} adding {log_in.type} reading to shipment {shipment_id}")
    try:
        reading = shipment_service.add_environmental_log(
            shipment_id, log_in.type, log_in.value, log_in.timestamp
        )
        return EnvironmentalLogResponse(
            message=f"{reading['type']} log added",
            log=EnvironmentalReading(**reading),
            is_alert=reading["is_alert"],
        )
    except ValidationException as e:
        logger.warning(f"Invalid reading for shipment {shipment_id}: {e.message}")
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=e.message)
    except EntityNotFoundException:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Shipment not found")
    except Exception as e:
        logger.error(f"Unexpected error adding reading to shipment {shipment_id}: {e}", exc_info=True)
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Error adding log.")
