# File: batteryfleet/api/endpoints/__init__.py
"""
API endpoints package for BatteryFleet.
"""

from batteryfleet.api.endpoints import (
    batteries,
    shipments,
    users,
)
