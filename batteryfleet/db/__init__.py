# File: batteryfleet/db/__init__.py
"""
Database package for BatteryFleet: engine/session management and models.
"""
