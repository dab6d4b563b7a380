"""
Shared fixtures: an in-memory motor database, a pinned clock and a
notifier that records events instead of sending email.
"""
from datetime import date, datetime, timedelta

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from db.indexes import ensure_indexes
from repositories.bookings import BookingRepository
from repositories.services import ServiceRepository
from schemas.services import ServiceCreate
from services.availability import AvailabilityEngine, OperatingHours
from services.bookings import BookingLifecycle
from services.catalog import ServiceCatalog


# Monday noon; tomorrow is Tuesday 2026-10-20, the next Sunday is 2026-10-25
NOW = datetime(2026, 10, 19, 12, 0)
TOMORROW = date(2026, 10, 20)
SUNDAY = date(2026, 10, 25)


class FixedClock:
    """Clock pinned to a given instant; advance() moves it forward."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def advance(self, delta: timedelta) -> None:
        self.current = self.current + delta


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.events = []
        self.fail = fail

    async def notify(self, event, booking) -> bool:
        self.events.append((event, booking))
        if self.fail:
            raise RuntimeError("smtp unavailable")
        return True

    def kinds(self):
        return [event for event, _ in self.events]


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest_asyncio.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["salon-test"]
    await ensure_indexes(database)
    yield database


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def catalog(db, clock):
    return ServiceCatalog(ServiceRepository(db, clock))


@pytest.fixture
def booking_repo(db, clock):
    return BookingRepository(db, clock)


@pytest.fixture
def lifecycle(booking_repo, catalog, notifier, clock):
    return BookingLifecycle(booking_repo, catalog, notifier, clock)


@pytest.fixture
def availability(catalog, booking_repo):
    return AvailabilityEngine(catalog, booking_repo, OperatingHours())


def service_payload(**overrides) -> ServiceCreate:
    data = {
        "name": "Haircut",
        "description": "Wash, precision cut and blow-dry.",
        "price": 50,
        "duration": {"minutes": 60},
        "category": "Hair",
        "icon": "scissors",
    }
    data.update(overrides)
    return ServiceCreate(**data)


@pytest_asyncio.fixture
async def haircut(catalog):
    return await catalog.create(service_payload())


CLIENT = {"name": "Jane Doe", "email": "Jane.Doe@Example.com", "phone": "555-123-4567"}


def day_after(days: int) -> date:
    return (NOW + timedelta(days=days)).date()
