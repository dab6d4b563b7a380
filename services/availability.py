"""
Slot availability for a single day.

The working day is a fixed grid (09:00-18:00 in 30 minute steps by default,
closed on Sundays). A slot is free when no active booking holds that exact
time; service duration is not used to block neighbouring slots.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List

from core.config import AppSettings
from repositories.bookings import BookingRepository
from services.catalog import ServiceCatalog


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatingHours:
    opening_hour: int = 9
    closing_hour: int = 18
    slot_minutes: int = 30
    # date.weekday() numbering; 6 is Sunday
    closed_weekday: int = 6

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "OperatingHours":
        return cls(
            opening_hour=settings.opening_hour,
            closing_hour=settings.closing_hour,
            slot_minutes=settings.slot_minutes,
            closed_weekday=settings.closed_weekday,
        )

    def is_closed(self, day: date) -> bool:
        return day.weekday() == self.closed_weekday

    def grid(self) -> List[str]:
        slots: List[str] = []
        minute = self.opening_hour * 60
        end = self.closing_hour * 60
        while minute < end:
            slots.append(f"{minute // 60:02d}:{minute % 60:02d}")
            minute += self.slot_minutes
        return slots


class AvailabilityEngine:
    def __init__(self, catalog: ServiceCatalog, bookings: BookingRepository, hours: OperatingHours) -> None:
        self.catalog = catalog
        self.bookings = bookings
        self.hours = hours

    async def available_slots(self, day: date, service_id: Any) -> List[str]:
        await self.catalog.resolve(service_id)
        if self.hours.is_closed(day):
            return []
        booked = await self.bookings.booked_times_on(day)
        slots = [t for t in self.hours.grid() if t not in booked]
        logger.info(
            "availability.computed",
            extra={"date": day.isoformat(), "service_id": str(service_id), "free": len(slots), "booked": len(booked)},
        )
        return slots
