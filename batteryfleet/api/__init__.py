# File: batteryfleet/api/__init__.py
"""
API package for BatteryFleet.

This package contains the API layer for the BatteryFleet application,
including endpoints, dependencies, and routing configuration.
"""

from batteryfleet.api import deps, endpoints
from batteryfleet.api.api import api_router
