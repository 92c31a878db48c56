# tests/conftest.py
"""
Pytest configuration.

Every test gets a fresh in-memory SQLite database. Dates that drive status
derivation are passed in explicitly (``today=...``) instead of patched.
"""

import os

# Set before any app import: config and the engine are built at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import create_access_token
from app.database import Base, get_db
from app.domain.bookings.schemas import BookingCreate
from app.domain.bookings.service import BookingService
from app.main import app
from app.models import Customer, MediaStatus, MediaUnit

TODAY = date(2024, 6, 15)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def file_sessions(tmp_path):
    """
    Session factory over a file database, for tests that need two sessions
    with independent connections (concurrent edits).
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _headers(role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(f'{role}-user', role=role)}"}


@pytest.fixture
def auth_headers():
    return _headers("admin")


@pytest.fixture
def viewer_headers():
    return _headers("viewer")


@pytest.fixture
def superadmin_headers():
    return _headers("superadmin")


def make_media(db: Session, code: str = "SRA-RPR-001", **overrides) -> MediaUnit:
    data = {
        "code": code,
        "name": f"Unipole {code}",
        "media_type": "Unipole",
        "state": "Chhattisgarh",
        "district": "Raipur",
        "city": "Raipur",
        "price_per_month": 50000,
        "status": MediaStatus.AVAILABLE,
    }
    data.update(overrides)
    media = MediaUnit(**data)
    db.add(media)
    db.commit()
    db.refresh(media)
    return media


def make_customer(db: Session, name: str = "Asha Verma", **overrides) -> Customer:
    data = {"name": name, "company": f"{name} Ads", "total_bookings": 0, "total_spent": 0}
    data.update(overrides)
    customer = Customer(**data)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def make_booking(db: Session, media, customer, start, end, amount=100000, amount_paid=0, today=TODAY):
    service = BookingService(db, today=lambda: today)
    return service.create_booking(
        BookingCreate(
            mediaId=media.id,
            customerId=customer.id,
            startDate=start,
            endDate=end,
            amount=amount,
            amountPaid=amount_paid,
        )
    )


@pytest.fixture
def media(db):
    return make_media(db)


@pytest.fixture
def customer(db):
    return make_customer(db)
