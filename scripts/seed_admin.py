from __future__ import annotations

import asyncio
import os

from db.database import close_database, get_database
from db.indexes import ensure_indexes
from services.security import create_initial_admin_if_missing


async def seed_admin(*, name: str, email: str, password: str) -> dict:
    db = await get_database()
    try:
        await ensure_indexes(db)
        admin = await create_initial_admin_if_missing(db, name, email, password)
        return {"id": str(admin.id), "name": admin.name, "email": admin.email, "role": admin.role}
    finally:
        await close_database()


if __name__ == "__main__":
    # Override via env before running against a shared database
    created = asyncio.run(
        seed_admin(
            name=os.getenv("ADMIN_NAME", "Salon Admin"),
            email=os.getenv("ADMIN_EMAIL", "admin@luxesalon.com"),
            password=os.getenv("ADMIN_PASSWORD", "change-me-now"),
        )
    )
    print("Seeded admin:", created)
