from __future__ import annotations

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.clock import Clock, get_clock
from core.config import settings
from db.database import get_database
from repositories.base import BaseRepository
from repositories.bookings import BookingRepository
from repositories.services import ServiceRepository
from services.analytics import AnalyticsService
from services.availability import AvailabilityEngine, OperatingHours
from services.bookings import BookingLifecycle
from services.catalog import ServiceCatalog
from services.notifications import Notifier, get_notifier


async def get_catalog(
    db: AsyncIOMotorDatabase = Depends(get_database),
    clock: Clock = Depends(get_clock),
) -> ServiceCatalog:
    return ServiceCatalog(ServiceRepository(db, clock))


async def get_lifecycle(
    db: AsyncIOMotorDatabase = Depends(get_database),
    clock: Clock = Depends(get_clock),
    notifier: Notifier = Depends(get_notifier),
    catalog: ServiceCatalog = Depends(get_catalog),
) -> BookingLifecycle:
    return BookingLifecycle(BookingRepository(db, clock), catalog, notifier, clock)


async def get_availability(
    db: AsyncIOMotorDatabase = Depends(get_database),
    clock: Clock = Depends(get_clock),
    catalog: ServiceCatalog = Depends(get_catalog),
) -> AvailabilityEngine:
    return AvailabilityEngine(catalog, BookingRepository(db, clock), OperatingHours.from_settings(settings))


async def get_analytics(
    db: AsyncIOMotorDatabase = Depends(get_database),
    clock: Clock = Depends(get_clock),
) -> AnalyticsService:
    return AnalyticsService(BaseRepository(db, clock), clock)
