from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

import logging
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from api.v1.deps import get_analytics
from models.booking import BookingStatus
from schemas.bookings import BookingOut
from services.analytics import AnalyticsService
from services.security import require_admin


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/dashboard")
async def dashboard(analytics: AnalyticsService = Depends(get_analytics)) -> Dict[str, Any]:
    return await analytics.dashboard()


@router.get("/bookings/stats")
async def booking_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    status: Optional[BookingStatus] = None,
    analytics: AnalyticsService = Depends(get_analytics),
) -> Dict[str, Any]:
    return await analytics.booking_stats(start_date, end_date, status)


@router.get("/revenue/analytics")
async def revenue_analytics(
    period: Literal["week", "month", "year"] = "month",
    analytics: AnalyticsService = Depends(get_analytics),
) -> Dict[str, Any]:
    return await analytics.revenue_analytics(period)


@router.get("/services/performance")
async def service_performance(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    analytics: AnalyticsService = Depends(get_analytics),
) -> List[Dict[str, Any]]:
    return await analytics.service_performance(start_date, end_date)


@router.get("/export/bookings")
async def export_bookings(
    format: Literal["json", "csv"] = Query("json"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    analytics: AnalyticsService = Depends(get_analytics),
):
    bookings = await analytics.export_bookings(start_date, end_date)
    exported_at = analytics.clock.now()
    logger.info("bookings.export", extra={"format": format, "count": len(bookings)})
    if format == "csv":
        return Response(
            content=analytics.to_csv(bookings),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=bookings-{exported_at.date().isoformat()}.csv"},
        )
    return {
        "bookings": [BookingOut.from_model(b).model_dump(mode="json") for b in bookings],
        "export_date": exported_at.isoformat(),
        "total_bookings": len(bookings),
    }


@router.get("/system/health")
async def system_health(analytics: AnalyticsService = Depends(get_analytics)) -> Dict[str, Any]:
    return await analytics.system_health()


@router.get("/users/activity")
async def user_activity(
    days: int = Query(7, ge=1, le=365),
    analytics: AnalyticsService = Depends(get_analytics),
) -> List[Dict[str, Any]]:
    return await analytics.user_activity(days)
