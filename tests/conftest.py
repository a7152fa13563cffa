# Test settings must be in place before the application is imported
import os

os.environ["DATABASE_DSN"] = "sqlite+aiosqlite:///./test_stayfinder.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from stayfinder import models  # noqa: F401  register mappers
from stayfinder.database import Base, get_db
from stayfinder.main import app

# --- Test Database Setup ---
SYNC_DATABASE_URL = "sqlite:///./test_stayfinder.db"
ASYNC_DATABASE_URL = "sqlite+aiosqlite:///./test_stayfinder.db"

sync_engine = create_engine(SYNC_DATABASE_URL, connect_args={"check_same_thread": False})

# TestClient runs the app on its own event loop, so connections are never pooled
test_engine = create_async_engine(ASYNC_DATABASE_URL, poolclass=NullPool)
TestingSessionLocal = async_sessionmaker(test_engine, expire_on_commit=False, autoflush=False)

API = "/api/v1"


def run_db(work):
    """Run ``work(session)`` in a fresh session and return its result."""

    async def _run():
        async with TestingSessionLocal() as session:
            return await work(session)

    return asyncio.run(_run())


# --- Database Management Fixtures ---
@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Fresh tables for every test."""
    Base.metadata.drop_all(bind=sync_engine)
    Base.metadata.create_all(bind=sync_engine)
    yield
    Base.metadata.drop_all(bind=sync_engine)


# --- API Test Client Fixture ---
@pytest.fixture(scope="function")
def client():
    async def override_get_db():
        async with TestingSessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# --- Accounts ---
def register(client: TestClient, email: str, role: str = "guest", name: str = "Test User") -> dict:
    """Register an account; returns its id and auth headers."""
    response = client.post(
        f"{API}/auth/register",
        json={"name": name, "email": email, "password": "secret123", "role": role},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        "id": data["user"]["id"],
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
        "refresh_token": data["refresh_token"],
    }


@pytest.fixture
def host(client):
    return register(client, "host@example.com", role="host", name="Hannah Host")


@pytest.fixture
def guest(client):
    return register(client, "guest@example.com", name="Gary Guest")


@pytest.fixture
def other_guest(client):
    return register(client, "other@example.com", name="Olive Other")


# --- Listings ---
def listing_payload(**overrides) -> dict:
    payload = {
        "title": "Sunny loft by the river",
        "description": "A bright two-bedroom loft with river views, a full kitchen and fast wifi.",
        "property_type": "loft",
        "room_type": "entire_place",
        "amenities": ["wifi", "kitchen"],
        "address": "12 River Street",
        "city": "Lisbon",
        "state": "Lisbon",
        "country": "Portugal",
        "zip_code": "1100-001",
        "max_guests": 4,
        "bedrooms": 2,
        "beds": 2,
        "bathrooms": "1.5",
        "base_price": "150.00",
        "cleaning_fee": "25.00",
        "status": "active",
    }
    payload.update(overrides)
    return payload


def create_listing(client: TestClient, host: dict, **overrides) -> dict:
    response = client.post(
        f"{API}/listings/", json=listing_payload(**overrides), headers=host["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def listing(client, host):
    return create_listing(client, host)


# --- Bookings ---
def booking_payload(listing_id: str, check_in: str, check_out: str, adults: int = 2, **extra) -> dict:
    payload = {
        "listing_id": listing_id,
        "check_in": check_in,
        "check_out": check_out,
        "guests": {"adults": adults},
        "payment_method": "credit_card",
    }
    payload.update(extra)
    return payload
