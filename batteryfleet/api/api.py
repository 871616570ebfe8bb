# batteryfleet/api/api.py

from fastapi import APIRouter

from batteryfleet.api.endpoints import (
    batteries,
    shipments,
    users,
)

api_router = APIRouter()

api_router.include_router(batteries.router, prefix="/batteries", tags=["Batteries"])
api_router.include_router(shipments.router, prefix="/shipments", tags=["Shipments"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
