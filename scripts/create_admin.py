# File: scripts/create_admin.py

import sys
import os
import logging
from pathlib import Path

# Add the parent directory to Python path
sys.path.append(str(Path(__file__).resolve().parent.parent))

from batteryfleet.db.init_db import init_db, ensure_first_admin
from batteryfleet.db.session import SessionLocal

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init() -> None:
    """
    Create the schema and the first admin user if it doesn't exist.

    Uses environment variables for email, password and name or the settings defaults.
    """
    # Import settings after sys.path has been modified
    from batteryfleet.core.config import settings

    admin_email = os.getenv("BATTERYFLEET_ADMIN_EMAIL", settings.FIRST_ADMIN_EMAIL)
    admin_password = os.getenv("BATTERYFLEET_ADMIN_PASSWORD", settings.FIRST_ADMIN_PASSWORD)
    admin_name = os.getenv("BATTERYFLEET_ADMIN_NAME", settings.FIRST_ADMIN_NAME)

    init_db()
    db = SessionLocal()
    try:
        user = ensure_first_admin(db, email=admin_email, password=admin_password, name=admin_name)
        logger.info(f"Admin user ready with ID: {user.id} ({user.email})")
    finally:
        db.close()


if __name__ == "__main__":
    logger.info("Creating admin user")
    init()
    logger.info("Admin user creation script completed")
