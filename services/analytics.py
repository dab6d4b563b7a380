from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from core.clock import Clock
from core.errors import PersistenceError
from models.booking import Booking, BookingStatus, date_to_datetime
from repositories.base import BaseRepository
from repositories.bookings import BOOKINGS
from repositories.services import SERVICES
from services.security import STAFF


logger = logging.getLogger(__name__)

# Revenue only counts bookings the salon has committed to
REVENUE_STATUSES = [BookingStatus.confirmed.value, BookingStatus.completed.value]

PERIODS = {
    # period: (bucket key format, days back)
    "week": ("%Y-%m-%d", 7),
    "month": ("%Y-%m-%d", 30),
    "year": ("%Y-%m", 365),
}

EXPORT_COLUMNS = [
    "Booking ID",
    "Client Name",
    "Client Email",
    "Client Phone",
    "Service",
    "Price",
    "Date",
    "Time",
    "Status",
    "Created At",
]


def _created_range(start: Optional[datetime], end: Optional[datetime]) -> Dict[str, Any]:
    if start and end:
        return {"created_at": {"$gte": start, "$lte": end}}
    return {}


def _summary(booking: Booking) -> Dict[str, Any]:
    return {
        "id": str(booking.id),
        "client_name": booking.client_name,
        "service_name": booking.service.name,
        "appointment_date": booking.appointment_date.isoformat(),
        "appointment_time": booking.appointment_time,
        "status": booking.status,
        "total_amount": booking.total_amount,
        "created_at": booking.created_at,
    }


class AnalyticsService:
    def __init__(self, repo: BaseRepository, clock: Clock) -> None:
        self.repo = repo
        self.clock = clock

    async def booking_counts(self) -> Dict[str, Any]:
        today = date_to_datetime(self.clock.today())
        counts: Dict[str, Any] = {"total": await self.repo.count_many(BOOKINGS)}
        for status in (BookingStatus.pending, BookingStatus.confirmed, BookingStatus.completed):
            counts[status.value] = await self.repo.count_many(BOOKINGS, {"status": status.value})
        counts["today_revenue"] = await self._revenue_sum(
            {"appointment_date": today, "status": {"$in": REVENUE_STATUSES}}
        )
        return counts

    async def dashboard(self) -> Dict[str, Any]:
        now = self.clock.now()
        recent_docs = await self.repo.find_many(BOOKINGS, {}, sort=[("created_at", DESCENDING)], limit=5)

        weekly = await self._revenue_series(now - timedelta(days=7), "%Y-%m-%d")

        top_services = await self.repo.aggregate(
            BOOKINGS,
            [
                {"$match": {"status": {"$in": REVENUE_STATUSES}}},
                {"$group": {"_id": "$service.name", "count": {"$sum": 1}, "revenue": {"$sum": "$total_amount"}}},
                {"$sort": {"count": -1, "_id": 1}},
                {"$limit": 5},
            ],
        )
        return {
            "booking_stats": await self.booking_counts(),
            "service_stats": await self.repo.count_many(SERVICES, {"available": True}),
            "recent_bookings": [_summary(Booking.from_document(d)) for d in recent_docs],
            "weekly_revenue": weekly,
            "top_services": [
                {"service_name": row["_id"], "count": row["count"], "revenue": row["revenue"]} for row in top_services
            ],
        }

    async def booking_stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[BookingStatus] = None,
    ) -> Dict[str, Any]:
        match = _created_range(start, end)
        if status is not None:
            match["status"] = BookingStatus(status).value
        rows = await self.repo.aggregate(
            BOOKINGS,
            [
                {"$match": match},
                {"$group": {"_id": "$status", "count": {"$sum": 1}, "revenue": {"$sum": "$total_amount"}}},
                {"$sort": {"_id": 1}},
            ],
        )
        return {
            "stats": [{"status": r["_id"], "count": r["count"], "revenue": r["revenue"]} for r in rows],
            "total_bookings": await self.repo.count_many(BOOKINGS, match),
            "total_revenue": await self._revenue_sum(match),
        }

    async def revenue_analytics(self, period: str = "month") -> Dict[str, Any]:
        fmt, days_back = PERIODS.get(period, PERIODS["month"])
        series = await self._revenue_series(self.clock.now() - timedelta(days=days_back), fmt)
        current = series[-1]["revenue"] if series else 0
        previous = series[-2]["revenue"] if len(series) > 1 else 0
        growth = ((current - previous) / previous) * 100 if previous > 0 else 0
        return {"revenue_data": series, "growth_percentage": round(growth, 2), "period": period}

    async def service_performance(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        rows = await self.repo.aggregate(
            BOOKINGS,
            [
                {"$match": _created_range(start, end)},
                {"$group": {"_id": "$service.name", "bookings": {"$sum": 1}, "revenue": {"$sum": "$total_amount"}}},
                {"$sort": {"revenue": -1, "_id": 1}},
            ],
        )
        return [{"service_name": r["_id"], "bookings": r["bookings"], "revenue": r["revenue"]} for r in rows]

    async def export_bookings(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Booking]:
        docs = await self.repo.find_many(BOOKINGS, _created_range(start, end), sort=[("created_at", DESCENDING)])
        return [Booking.from_document(d) for d in docs]

    @staticmethod
    def to_csv(bookings: List[Booking]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_COLUMNS)
        for b in bookings:
            writer.writerow(
                [
                    str(b.id),
                    b.client_name,
                    b.client_email,
                    b.client_phone,
                    b.service.name,
                    f"{b.service.price:.2f}",
                    b.appointment_date.isoformat(),
                    b.appointment_time,
                    b.status,
                    b.created_at.isoformat() if b.created_at else "",
                ]
            )
        return buffer.getvalue()

    async def system_health(self) -> Dict[str, Any]:
        timestamp = self.clock.now().isoformat()
        try:
            metrics = {
                "total_bookings": await self.repo.count_many(BOOKINGS),
                "active_bookings": await self.repo.count_many(
                    BOOKINGS, {"status": {"$in": [BookingStatus.pending.value, BookingStatus.confirmed.value]}}
                ),
                "total_services": await self.repo.count_many(SERVICES),
                "available_services": await self.repo.count_many(SERVICES, {"available": True}),
            }
        except PersistenceError:
            logger.error("health.database_unreachable")
            return {"status": "unhealthy", "timestamp": timestamp, "services": {"database": "disconnected", "api": "running"}}
        return {
            "status": "healthy",
            "timestamp": timestamp,
            "services": {"database": "connected", "api": "running"},
            "metrics": metrics,
        }

    async def user_activity(self, days: int = 7) -> List[Dict[str, Any]]:
        """Active staff per calendar day, counted by each member's latest login."""
        rows = await self.repo.aggregate(
            STAFF,
            [
                {"$match": {"last_login": {"$gte": self.clock.now() - timedelta(days=days)}}},
                {
                    "$group": {
                        "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$last_login"}},
                        "active_users": {"$sum": 1},
                    }
                },
                {"$sort": {"_id": 1}},
            ],
        )
        return [{"date": r["_id"], "active_users": r["active_users"]} for r in rows]

    async def _revenue_sum(self, match: Dict[str, Any]) -> float:
        rows = await self.repo.aggregate(
            BOOKINGS,
            [{"$match": match}, {"$group": {"_id": None, "total": {"$sum": "$total_amount"}}}],
        )
        return rows[0]["total"] if rows else 0

    async def _revenue_series(self, since: datetime, fmt: str) -> List[Dict[str, Any]]:
        rows = await self.repo.aggregate(
            BOOKINGS,
            [
                {"$match": {"created_at": {"$gte": since}, "status": {"$in": REVENUE_STATUSES}}},
                {
                    "$group": {
                        "_id": {"$dateToString": {"format": fmt, "date": "$created_at"}},
                        "revenue": {"$sum": "$total_amount"},
                        "bookings": {"$sum": 1},
                    }
                },
                {"$sort": {"_id": 1}},
            ],
        )
        return [{"period": r["_id"], "revenue": float(r["revenue"]), "bookings": r["bookings"]} for r in rows]
