# File: batteryfleet/db/session.py
"""
Database session management for BatteryFleet.

Usage:
    from batteryfleet.db.session import get_db

    # In FastAPI dependency
    def some_endpoint(db: Session = Depends(get_db)):
        # Use db for database operations
        ...
"""

import logging
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from batteryfleet.core.config import settings

# Configure module logger
logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    kwargs = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # Sessions are handed across FastAPI's threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if engine.dialect.name == "sqlite":
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get a database session with proper resource management.

    Returns:
        SQLAlchemy Session for database operations
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Error in get_db: {e}")
        raise
    finally:
        db.close()
