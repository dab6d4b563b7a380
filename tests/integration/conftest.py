"""HTTP clients wired to the in-memory database through dependency overrides."""
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from core.clock import get_clock
from db.database import get_database
from main import app
from models.staff import StaffMember
from services.notifications import get_notifier
from services.security import require_admin


ADMIN = StaffMember(name="Salon Admin", email="admin@luxesalon.com", role="admin", hashed_password="x")


def _wire(db, clock, notifier):
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier


@pytest_asyncio.fixture
async def anonymous_client(db, clock, notifier):
    _wire(db, clock, notifier)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(db, clock, notifier):
    _wire(db, clock, notifier)
    app.dependency_overrides[require_admin] = lambda: ADMIN
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def service_id(client):
    response = await client.post(
        "/api/v1/services",
        json={
            "name": "Haircut",
            "description": "Wash, precision cut and blow-dry.",
            "price": 50,
            "duration": {"minutes": 60, "label": "1 hour"},
            "category": "Hair",
            "icon": "scissors",
            "popular": True,
        },
    )
    assert response.status_code == 201
    return response.json()["service"]["id"]
