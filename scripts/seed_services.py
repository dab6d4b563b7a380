from __future__ import annotations

import asyncio
from typing import List

from pydantic import ValidationError as PydanticValidationError

from core.errors import ConflictError
from db.database import close_database, get_database
from db.indexes import ensure_indexes
from repositories.services import ServiceRepository
from schemas.services import ServiceCreate
from services.catalog import ServiceCatalog


DEFAULT_SERVICES: List[dict] = [
    {
        "name": "Haircut & Styling",
        "description": "Precision cut, wash and blow-dry styled to suit you.",
        "price": 50,
        "duration": {"minutes": 60},
        "category": "Hair",
        "icon": "scissors",
        "popular": True,
        "features": ["Consultation", "Wash", "Blow-dry"],
    },
    {
        "name": "Hair Coloring",
        "description": "Full color or highlights with professional-grade products.",
        "price": 120,
        "duration": {"minutes": 120, "label": "2 hours"},
        "category": "Hair",
        "icon": "palette",
        "requirements": ["Patch test 48h before"],
    },
    {
        "name": "Signature Facial",
        "description": "Deep cleanse, exfoliation and hydrating mask.",
        "price": 85,
        "duration": {"minutes": 75},
        "category": "Skincare",
        "icon": "sparkles",
        "popular": True,
    },
    {
        "name": "Gel Manicure",
        "description": "Nail shaping, cuticle care and long-lasting gel polish.",
        "price": 40,
        "duration": {"minutes": 45},
        "category": "Nails",
        "icon": "hand",
    },
    {
        "name": "Brow Lamination",
        "description": "Brow shaping and lamination for a fuller, groomed look.",
        "price": 55,
        "duration": {"minutes": 45},
        "category": "Brows & Lashes",
        "icon": "eye",
    },
    {
        "name": "Bridal Makeup",
        "description": "Trial and wedding-day makeup with long-wear finish.",
        "price": 250,
        "duration": {"minutes": 150, "label": "2.5 hours"},
        "category": "Bridal",
        "icon": "heart",
    },
]


async def seed_services() -> int:
    db = await get_database()
    created = 0
    try:
        await ensure_indexes(db)
        catalog = ServiceCatalog(ServiceRepository(db))
        for raw in DEFAULT_SERVICES:
            try:
                await catalog.create(ServiceCreate(**raw))
                created += 1
            except ConflictError:
                print(f"skip (exists): {raw['name']}")
            except PydanticValidationError as exc:
                print(f"skip (invalid): {raw['name']}: {exc}")
    finally:
        await close_database()
    return created


if __name__ == "__main__":
    print("Seeded services:", asyncio.run(seed_services()))
