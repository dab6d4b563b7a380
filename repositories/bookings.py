from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING

from models.booking import ACTIVE_STATUSES, Booking, BookingStatus, date_to_datetime

from .base import BaseRepository


BOOKINGS = "bookings"

ACTIVE_STATUS_VALUES = sorted(s.value for s in ACTIVE_STATUSES)


class BookingRepository(BaseRepository):
    async def get(self, booking_id: Any) -> Optional[Booking]:
        doc = await self.find_by_id(BOOKINGS, booking_id)
        return Booking.from_document(doc) if doc else None

    async def find_active_at(self, appointment_date: date, appointment_time: str) -> Optional[Booking]:
        doc = await self.find_one(
            BOOKINGS,
            {
                "appointment_date": date_to_datetime(appointment_date),
                "appointment_time": appointment_time,
                "status": {"$in": ACTIVE_STATUS_VALUES},
            },
        )
        return Booking.from_document(doc) if doc else None

    async def booked_times_on(self, appointment_date: date) -> set[str]:
        docs = await self.find_many(
            BOOKINGS,
            {
                "appointment_date": date_to_datetime(appointment_date),
                "status": {"$in": ACTIVE_STATUS_VALUES},
            },
            projection={"appointment_time": 1},
        )
        return {d["appointment_time"] for d in docs if d.get("appointment_time")}

    async def insert(self, booking: Booking) -> Booking:
        inserted_id = await self.insert_one(BOOKINGS, booking.to_document())
        doc = await self.find_one(BOOKINGS, {"_id": inserted_id})
        return Booking.from_document(doc)

    async def compare_and_set_status(
        self,
        booking_id: ObjectId,
        expected: BookingStatus,
        target: BookingStatus,
        *,
        release_slot: bool,
    ) -> Optional[Booking]:
        """Move a booking from ``expected`` to ``target``; None if it was no longer ``expected``."""
        update: Dict[str, Any] = {"$set": {"status": target.value}}
        if release_slot:
            update["$unset"] = {"slot_key": ""}
        doc = await self.find_one_and_update(
            BOOKINGS,
            {"_id": booking_id, "status": expected.value},
            update,
        )
        return Booking.from_document(doc) if doc else None

    @staticmethod
    def build_filter(status: Optional[BookingStatus] = None, appointment_date: Optional[date] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if status is not None:
            query["status"] = status.value
        if appointment_date is not None:
            query["appointment_date"] = date_to_datetime(appointment_date)
        return query

    async def page(self, query: Dict[str, Any], *, page: int, limit: int) -> tuple[List[Booking], int]:
        docs = await self.find_many(
            BOOKINGS,
            query,
            sort=[("appointment_date", ASCENDING), ("appointment_time", ASCENDING)],
            skip=(page - 1) * limit,
            limit=limit,
        )
        total = await self.count_many(BOOKINGS, query)
        return [Booking.from_document(d) for d in docs], total

    async def mark_reminded(self, booking_id: ObjectId) -> None:
        await self.update_one(BOOKINGS, {"_id": booking_id}, {"$set": {"reminder_sent_at": self.clock.now()}})

    async def due_for_reminder(self, appointment_date: date, *, limit: int = 200) -> List[Booking]:
        docs = await self.find_many(
            BOOKINGS,
            {
                "appointment_date": date_to_datetime(appointment_date),
                "status": {"$in": ACTIVE_STATUS_VALUES},
                "reminder_sent_at": None,
            },
            sort=[("appointment_time", ASCENDING)],
            limit=limit,
        )
        return [Booking.from_document(d) for d in docs]
