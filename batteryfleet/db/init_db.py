# File: batteryfleet/db/init_db.py
"""
Database initialization functions for BatteryFleet.

This module creates the schema and the first administrator account.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from batteryfleet.core.config import settings
from batteryfleet.core.exceptions import DuplicateEntityException
from batteryfleet.db import models  # noqa: F401  (registers all tables)
from batteryfleet.db.models.base import Base
from batteryfleet.db.session import SessionLocal, engine as default_engine

logger = logging.getLogger(__name__)


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet."""
    bind = engine or default_engine
    logger.info("Initializing database schema...")
    Base.metadata.create_all(bind=bind)
    logger.info("Database schema ready")


def ensure_first_admin(
    db: Session,
    email: Optional[str] = None,
    password: Optional[str] = None,
    name: Optional[str] = None,
):
    """
    Create the first administrator unless a user with that email exists.

    Returns:
        The existing or newly created admin user
    """
    from batteryfleet.schemas.user import UserCreate
    from batteryfleet.services.user_service import UserService
    from batteryfleet.db.models.enums import UserRole

    admin_email = email or settings.FIRST_ADMIN_EMAIL
    user_service = UserService(db)

    admin = user_service.get_by_email(admin_email)
    if admin:
        logger.info(f"Admin user already exists: {admin_email}")
        return admin

    logger.info(f"Creating initial admin user: {admin_email}")
    admin_in = UserCreate(
        name=name or settings.FIRST_ADMIN_NAME,
        email=admin_email,
        password=password or settings.FIRST_ADMIN_PASSWORD,
        role=UserRole.ADMIN,
    )
    try:
        admin = user_service.create_user(admin_in)
    except DuplicateEntityException:
        # Created concurrently by another process
        return user_service.get_by_email(admin_email)
    logger.info(f"Admin user created with ID: {admin.id}")
    return admin


def main() -> None:
    """Run database initialization."""
    logger.info("Creating initial data")
    init_db()
    db = SessionLocal()
    try:
        ensure_first_admin(db)
    finally:
        db.close()
    logger.info("Initial data created")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
