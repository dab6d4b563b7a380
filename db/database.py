from __future__ import annotations

from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from core.config import settings


@lru_cache(maxsize=1)
def get_motor_client() -> AsyncIOMotorClient:
    # tz_aware=False keeps stored appointment dates as naive local midnights
    return AsyncIOMotorClient(settings.mongo_uri, appname="salon-backend", tz_aware=False)


async def get_database() -> AsyncIOMotorDatabase:
    """Request-scoped handle on the salon database; the client is shared."""
    return get_motor_client()[settings.database_name]


async def close_database() -> None:
    get_motor_client().close()
    # A later get_database() (e.g. the next cron run in-process) gets a fresh client
    get_motor_client.cache_clear()
