# File: batteryfleet/services/base_service.py

from typing import TypeVar, Generic, List, Optional, Type, Any
from contextlib import contextmanager
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from batteryfleet.core.events import DomainEvent
from batteryfleet.core.exceptions import (
    BatteryFleetException,
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)
from batteryfleet.db.models.base import ModelValidationError
from batteryfleet.repositories.base_repository import BaseRepository

T = TypeVar("T")
logger = logging.getLogger(__name__)


class BaseService(Generic[T]):
    """
    Base service for all BatteryFleet services.

    Provides common functionality including:
    - Transaction management (one commit or one rollback per operation)
    - Error standardization
    - Domain event publishing after commit
    """

    def __init__(
            self,
            session: Session,
            repository_class: Optional[Type[BaseRepository]] = None,
            repository: Optional[BaseRepository] = None,
            event_bus=None,
    ):
        """
        Initialize service with dependencies.

        Args:
            session: Database session for persistence operations
            repository_class: Repository class to instantiate (optional if repository is provided)
            repository: Repository instance (optional if repository_class is provided)
            event_bus: Optional event bus for publishing domain events
        """
        self.session = session

        if repository is not None:
            self.repository = repository
        elif repository_class is not None:
            self.repository = repository_class(session)
        else:
            self.repository = None

        self.event_bus = event_bus
        self._pending_events: List[DomainEvent] = []

    @contextmanager
    def transaction(self):
        """
        Provide a transactional scope around operations.

        Commits when the block finishes, then publishes the events queued with
        `_queue_event`. On any exception everything is rolled back, queued
        events are dropped, and database errors are translated into domain
        exceptions.
        """
        try:
            yield
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            self._pending_events.clear()
            if isinstance(e, BatteryFleetException):
                logger.warning(f"Transaction rolled back: {e.message}")
            else:
                logger.error(f"Transaction failed: {str(e)}", exc_info=True)

            transformed = self._transform_error(e)
            if transformed:
                raise transformed from e
            raise

        events, self._pending_events = self._pending_events, []
        for event in events:
            self._publish_event(event)

    def _transform_error(self, error: Exception) -> Optional[BatteryFleetException]:
        """Map persistence-level errors onto domain exceptions."""
        if isinstance(error, IntegrityError):
            message = str(error.orig) if error.orig is not None else str(error)
            if "unique" in message.lower() or "duplicate" in message.lower():
                return DuplicateEntityException(
                    "Record violates a uniqueness constraint", {"error": message}
                )
            return ValidationException(
                "Record violates a database constraint", {"database": [message]}
            )
        if isinstance(error, ModelValidationError):
            return ValidationException(str(error), {error.field: [error.message]})
        return None

    def _queue_event(self, event: DomainEvent) -> None:
        self._pending_events.append(event)

    def _publish_event(self, event: DomainEvent) -> None:
        if not self.event_bus:
            return
        try:
            self.event_bus.publish(event)
        except Exception as e:
            logger.error(f"Failed to publish {type(event).__name__}: {e}", exc_info=True)

    def get_by_id(self, id: int) -> Optional[T]:
        return self.repository.get_by_id(id)

    def get_or_raise(self, id: Any, entity_type: str) -> T:
        """
        Get entity by ID or raise EntityNotFoundException.

        Args:
            id: Entity ID to retrieve
            entity_type: Name used in the error message

        Returns:
            The entity
        """
        entity = self.repository.get_by_id(id)
        if entity is None:
            raise EntityNotFoundException(entity_type, id)
        return entity
