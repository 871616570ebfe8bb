# File: batteryfleet/core/events.py

from typing import Dict, Callable, List, Optional, Union, Type
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
import uuid
import logging

from fastapi import FastAPI

logger = logging.getLogger(__name__)

EventHandler = Callable[["DomainEvent"], None]


# --- Base DomainEvent ---
@dataclass(eq=False)
class DomainEvent:
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)


# --- Shipment Event Definitions ---
@dataclass(eq=False)
class ShipmentCreated(DomainEvent):
    shipment_id: int = 0
    shipment_number: str = ""
    battery_ids: List[int] = field(default_factory=list)
    user_id: Optional[int] = None


@dataclass(eq=False)
class ShipmentStatusChanged(DomainEvent):
    shipment_id: int = 0
    shipment_number: str = ""
    previous_status: str = ""
    new_status: str = ""
    location: Optional[str] = None
    user_id: Optional[int] = None


@dataclass(eq=False)
class ShipmentBatteriesChanged(DomainEvent):
    shipment_id: int = 0
    attached_battery_ids: List[int] = field(default_factory=list)
    detached_battery_ids: List[int] = field(default_factory=list)
    user_id: Optional[int] = None


@dataclass(eq=False)
class EnvironmentalAlertRaised(DomainEvent):
    """Event fired when an environmental reading falls outside its safe range."""
    shipment_id: int = 0
    shipment_number: str = ""
    reading_type: str = ""
    value: float = 0.0
    reading_timestamp: Optional[datetime] = None


# --- Event Bus Class ---
class EventBus:
    """
    In-process event bus for domain events.

    Handlers are keyed by event class name. Handler exceptions are logged and
    never propagate to the publisher.

    Usage:
        global_event_bus.subscribe(ShipmentStatusChanged, handle_status_changed)
        global_event_bus.publish(ShipmentStatusChanged(shipment_id=12))
    """

    def __init__(self):
        self.subscribers: Dict[str, List[EventHandler]] = defaultdict(list)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all registered handlers."""
        event_type = type(event).__name__
        logger.debug(f"Publishing event {event_type} ID {event.event_id}")
        for handler in list(self.subscribers.get(event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Error in handler {getattr(handler, '__name__', repr(handler))} "
                    f"for {event_type} ID {event.event_id}: {e}",
                    exc_info=True,
                )

    def subscribe(self, event_type: Union[str, Type[DomainEvent]], handler: EventHandler) -> None:
        """
        Subscribe a handler to an event type.

        Args:
            event_type: Event class or event type name string
            handler: Callable receiving the event
        """
        event_type_name = event_type.__name__ if isinstance(event_type, type) else str(event_type)
        if handler not in self.subscribers[event_type_name]:
            self.subscribers[event_type_name].append(handler)
        logger.debug(f"Subscribed handler {getattr(handler, '__name__', repr(handler))} to {event_type_name}")

    def clear_subscriptions(self) -> None:
        self.subscribers.clear()


# Global event bus instance
global_event_bus = EventBus()


# --- FastAPI Event Handlers Setup ---
def setup_event_handlers(app: FastAPI) -> None:
    """
    Register startup/shutdown hooks: create the schema and subscribe the
    logging handlers for fleet events.
    """

    @app.on_event("startup")
    async def startup_event():
        from batteryfleet.db.init_db import init_db
        from batteryfleet.services.event_handlers import register_event_handlers

        logger.info("Application starting up")
        init_db()
        register_event_handlers(global_event_bus)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutting down")
        global_event_bus.clear_subscriptions()
