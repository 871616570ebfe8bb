# File: batteryfleet/repositories/battery_repository.py
"""
Repository for Battery entity operations.

This module provides data access for batteries, including paginated search
and the bulk attach/release updates used when shipments change.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, update, desc

from batteryfleet.db.models.battery import Battery
from batteryfleet.db.models.enums import BatteryStatus
from batteryfleet.repositories.base_repository import BaseRepository

SEARCH_FIELDS = ["serial_number", "model", "manufacturer"]


class BatteryRepository(BaseRepository[Battery]):
    """
    Repository for Battery entity operations.
    """

    def __init__(self, session: Session):
        super().__init__(session, Battery)

    def get_by_serial_number(self, serial_number: str) -> Optional[Battery]:
        stmt = select(Battery).where(Battery.serial_number == serial_number)
        return self.session.execute(stmt).scalar_one_or_none()

    def search_page(
        self,
        page: int,
        page_size: int,
        keyword: Optional[str] = None,
        status: Optional[str] = None,
        min_health: Optional[float] = None,
    ) -> Tuple[List[Battery], int, int]:
        """
        Get one page of batteries, newest first.

        Args:
            page: 1-based page number
            page_size: Number of batteries per page
            keyword: Case-insensitive substring over serial number, model, manufacturer
            status: Exact battery status
            min_health: Minimum health_status (inclusive)

        Returns:
            Tuple of (batteries, total, pages)
        """
        stmt = select(Battery)
        keyword_clause = self._keyword_clause(keyword, SEARCH_FIELDS)
        if keyword_clause is not None:
            stmt = stmt.where(keyword_clause)
        if status:
            stmt = stmt.where(Battery.status == status)
        if min_health is not None:
            stmt = stmt.where(Battery.health_status >= min_health)

        stmt = stmt.order_by(desc(Battery.created_at), desc(Battery.id))
        return self._paginate(stmt, page, page_size)

    def list_below_health(self, threshold: float) -> List[Battery]:
        """Batteries with health_status strictly below `threshold`, weakest first."""
        stmt = (
            select(Battery)
            .where(Battery.health_status < threshold)
            .order_by(Battery.health_status, Battery.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_by_shipment(self, shipment_id: int) -> List[Battery]:
        stmt = select(Battery).where(Battery.shipment_id == shipment_id).order_by(Battery.id)
        return list(self.session.execute(stmt).scalars().all())

    def attach_to_shipment(self, battery_ids: List[int], shipment_id: int, location: str) -> int:
        """
        Point the given batteries at a shipment and mark them in transit.

        Returns:
            Number of batteries updated
        """
        if not battery_ids:
            return 0
        stmt = (
            update(Battery)
            .where(Battery.id.in_(battery_ids))
            .values(
                shipment_id=shipment_id,
                status=BatteryStatus.IN_TRANSIT.value,
                location=location,
            )
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def set_status_for_shipment(self, shipment_id: int, status: str, location: Optional[str]) -> int:
        """Set status and location on every battery currently in a shipment."""
        values = {"status": status}
        if location is not None:
            values["location"] = location
        stmt = (
            update(Battery)
            .where(Battery.shipment_id == shipment_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def release(self, battery_ids: List[int], location: Optional[str]) -> int:
        """
        Detach batteries from their shipment and make them available again.

        Returns:
            Number of batteries updated
        """
        if not battery_ids:
            return 0
        values = {"shipment_id": None, "status": BatteryStatus.AVAILABLE.value}
        if location is not None:
            values["location"] = location
        stmt = (
            update(Battery)
            .where(Battery.id.in_(battery_ids))
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def release_all_from_shipment(self, shipment_id: int, location: Optional[str]) -> int:
        values = {"shipment_id": None, "status": BatteryStatus.AVAILABLE.value}
        if location is not None:
            values["location"] = location
        stmt = (
            update(Battery)
            .where(Battery.shipment_id == shipment_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount
