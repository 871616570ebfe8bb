# File: batteryfleet/repositories/shipment_repository.py
"""
Repository for Shipment entity operations.

This module provides data access functionality for shipments and the
history rows they own (status updates and environmental readings).
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, exists, or_, desc

from batteryfleet.db.models.enums import ACTIVE_SHIPMENT_STATUSES
from batteryfleet.db.models.shipment import (
    Shipment,
    ShipmentStatusUpdate,
    TemperatureLog,
    HumidityLog,
    ShockEvent,
)
from batteryfleet.repositories.base_repository import BaseRepository

SEARCH_FIELDS = ["shipment_number", "origin", "destination", "carrier"]


class ShipmentRepository(BaseRepository[Shipment]):
    """
    Repository for Shipment entity operations.

    Provides methods for retrieving, creating and updating shipment records.
    """

    def __init__(self, session: Session):
        super().__init__(session, Shipment)

    def get_by_number(self, shipment_number: str) -> Optional[Shipment]:
        stmt = select(Shipment).where(Shipment.shipment_number == shipment_number)
        return self.session.execute(stmt).scalar_one_or_none()

    def search_page(
        self,
        page: int,
        page_size: int,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Shipment], int, int]:
        """
        Get one page of shipments, newest first.

        Args:
            page: 1-based page number
            page_size: Number of shipments per page
            keyword: Case-insensitive substring over number, origin, destination, carrier
            status: Exact shipment status

        Returns:
            Tuple of (shipments, total, pages)
        """
        stmt = select(Shipment)
        keyword_clause = self._keyword_clause(keyword, SEARCH_FIELDS)
        if keyword_clause is not None:
            stmt = stmt.where(keyword_clause)
        if status:
            stmt = stmt.where(Shipment.status == status)

        stmt = stmt.order_by(desc(Shipment.created_at), desc(Shipment.id))
        return self._paginate(stmt, page, page_size)

    def list_with_active_alerts(self) -> List[Shipment]:
        """
        Active shipments with at least one alert-flagged reading,
        most recently modified first.
        """
        alert_clauses = [
            exists().where(log.shipment_id == Shipment.id, log.is_alert.is_(True))
            for log in (TemperatureLog, HumidityLog, ShockEvent)
        ]
        stmt = (
            select(Shipment)
            .where(Shipment.status.in_(ACTIVE_SHIPMENT_STATUSES))
            .where(or_(*alert_clauses))
            .order_by(desc(Shipment.updated_at), desc(Shipment.id))
        )
        return list(self.session.execute(stmt).scalars().all())

    def add_status_update(
        self,
        shipment: Shipment,
        status: str,
        location: Optional[str],
        notes: Optional[str],
        updated_by_id: Optional[int],
    ) -> ShipmentStatusUpdate:
        entry = ShipmentStatusUpdate(
            status=status,
            location=location,
            notes=notes,
            updated_by_id=updated_by_id,
        )
        shipment.status_updates.append(entry)
        self.session.flush()
        return entry

    def add_reading(self, shipment: Shipment, entry) -> None:
        """Append a temperature, humidity or shock entry to its collection."""
        if isinstance(entry, TemperatureLog):
            shipment.temperature_logs.append(entry)
        elif isinstance(entry, HumidityLog):
            shipment.humidity_logs.append(entry)
        elif isinstance(entry, ShockEvent):
            shipment.shock_events.append(entry)
        else:
            raise TypeError(f"Unsupported reading type: {type(entry).__name__}")
        self.session.flush()
