from __future__ import annotations

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from repositories.bookings import BOOKINGS
from repositories.services import SERVICES


logger = logging.getLogger(__name__)


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    bookings = db[BOOKINGS]
    await bookings.create_index([("appointment_date", ASCENDING), ("appointment_time", ASCENDING)])
    await bookings.create_index([("status", ASCENDING)])
    await bookings.create_index([("client_email", ASCENDING)])
    await bookings.create_index([("created_at", DESCENDING)])
    # Only active bookings carry slot_key, so at most one of them can hold a slot
    await bookings.create_index("slot_key", unique=True, sparse=True, name="active_slot_unique")

    services = db[SERVICES]
    await services.create_index("name", unique=True)
    await services.create_index([("category", ASCENDING)])
    await services.create_index([("popular", ASCENDING)])
    await services.create_index([("available", ASCENDING)])

    await db["staff"].create_index("email", unique=True)
    logger.info("db.indexes_ensured", extra={"database": db.name})
