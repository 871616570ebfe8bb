# File: batteryfleet/services/event_handlers.py
"""
Subscribers for shipment domain events.
"""

import logging

from batteryfleet.core.events import (
    EventBus,
    ShipmentCreated,
    ShipmentStatusChanged,
    ShipmentBatteriesChanged,
    EnvironmentalAlertRaised,
)

logger = logging.getLogger(__name__)


def log_shipment_created(event: ShipmentCreated) -> None:
    logger.info(
        f"Shipment {event.shipment_number} (ID {event.shipment_id}) created "
        f"with batteries {event.battery_ids} by user {event.user_id}"
    )


def log_status_changed(event: ShipmentStatusChanged) -> None:
    logger.info(
        f"Shipment {event.shipment_number}: {event.previous_status} -> {event.new_status}"
        f" at {event.location or 'unknown location'} (user {event.user_id})"
    )


def log_batteries_changed(event: ShipmentBatteriesChanged) -> None:
    logger.info(
        f"Shipment {event.shipment_id} membership changed: "
        f"+{event.attached_battery_ids} -{event.detached_battery_ids}"
    )


def log_environmental_alert(event: EnvironmentalAlertRaised) -> None:
    logger.warning(
        f"ENVIRONMENTAL ALERT shipment {event.shipment_number}: "
        f"{event.reading_type}={event.value} at {event.reading_timestamp}"
    )


def register_event_handlers(bus: EventBus) -> None:
    """Subscribe the logging handlers; safe to call more than once."""
    bus.subscribe(ShipmentCreated, log_shipment_created)
    bus.subscribe(ShipmentStatusChanged, log_status_changed)
    bus.subscribe(ShipmentBatteriesChanged, log_batteries_changed)
    bus.subscribe(EnvironmentalAlertRaised, log_environmental_alert)
    logger.info("Fleet event handlers registered")
