# tests/conftest.py
from datetime import date
from typing import Dict, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from batteryfleet.api.api import api_router
from batteryfleet.core.config import settings
from batteryfleet.core.events import DomainEvent, EventBus
from batteryfleet.db import models  # noqa: F401
from batteryfleet.db.models.base import Base
from batteryfleet.db.models.enums import UserRole
from batteryfleet.db.session import get_db
from batteryfleet.schemas.user import UserCreate
from batteryfleet.services.user_service import UserService

TEST_PASSWORD = "secret123"


@pytest.fixture()
def engine():
    """A fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


class RecordingBus(EventBus):
    """EventBus that also keeps every published event."""

    def __init__(self):
        super().__init__()
        self.published: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self.published.append(event)
        super().publish(event)

    def of_type(self, event_type) -> List[DomainEvent]:
        return [e for e in self.published if isinstance(e, event_type)]


@pytest.fixture()
def event_bus() -> RecordingBus:
    return RecordingBus()


def make_user(session: Session, email: str, role: str = UserRole.OPERATOR.value, password: str = TEST_PASSWORD):
    return UserService(session).create_user(
        UserCreate(name=email.split("@")[0].title(), email=email, password=password, role=role)
    )


def battery_data(serial_number: str = "BAT-001", **overrides) -> Dict:
    data = {
        "serial_number": serial_number,
        "model": "PowerCell 5000",
        "manufacturer": "Voltix",
        "capacity": 5000,
        "capacity_unit": "mAh",
        "voltage": 3.7,
        "chemistry": "Li-ion",
        "manufacture_date": date(2022, 3, 1),
    }
    data.update(overrides)
    return data


def shipment_data(shipment_number: str = "SHP-1", batteries=None, **overrides) -> Dict:
    data = {
        "shipment_number": shipment_number,
        "origin": "Warehouse A",
        "destination": "Plant 7",
        "carrier": "FastFreight",
        "batteries": batteries or [],
    }
    data.update(overrides)
    return data


# --- API fixtures ---

@pytest.fixture()
def app(session_factory) -> FastAPI:
    """API router mounted on a bare app, with the database dependency overridden."""
    app = FastAPI()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


@pytest.fixture()
def client(app) -> TestClient:
    with TestClient(app) as client:
        yield client


def login(client: TestClient, email: str, password: str = TEST_PASSWORD) -> Dict[str, str]:
    """Log in and return bearer headers; the cookie set by login is dropped."""
    response = client.post(
        f"{settings.API_PREFIX}/users/login",
        data={"username": email, "password": password},
    )
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client, db_session) -> Dict[str, str]:
    make_user(db_session, "admin@example.com", UserRole.ADMIN.value)
    return login(client, "admin@example.com")


@pytest.fixture()
def manager_headers(client, db_session) -> Dict[str, str]:
    make_user(db_session, "manager@example.com", UserRole.MANAGER.value)
    return login(client, "manager@example.com")


@pytest.fixture()
def operator_headers(client, db_session) -> Dict[str, str]:
    make_user(db_session, "operator@example.com", UserRole.OPERATOR.value)
    return login(client, "operator@example.com")
