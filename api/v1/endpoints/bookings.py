from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from api.v1.deps import get_availability, get_lifecycle
from core.errors import ValidationError
from schemas.bookings import (
    AvailableSlots,
    BookingCreateBody,
    BookingMessage,
    BookingOut,
    BookingPage,
    StatusUpdateBody,
)
from services.availability import AvailabilityEngine
from services.bookings import BookingLifecycle
from services.notifications import NotificationEvent, Notifier, emit, get_notifier
from services.security import require_admin


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/available-slots/{appointment_date}", response_model=AvailableSlots)
async def available_slots(
    appointment_date: date,
    service_id: Optional[str] = Query(None),
    engine: AvailabilityEngine = Depends(get_availability),
) -> AvailableSlots:
    if not service_id:
        raise ValidationError("Service ID is required", [{"field": "service_id", "message": "Service ID is required"}])
    slots = await engine.available_slots(appointment_date, service_id)
    return AvailableSlots(appointment_date=appointment_date, service_id=service_id, available_slots=slots)


@router.get("", response_model=BookingPage, dependencies=[Depends(require_admin)])
async def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    appointment_date: Optional[date] = Query(None, alias="date"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
) -> BookingPage:
    result = await lifecycle.list(status=status_filter, appointment_date=appointment_date, page=page, limit=limit)
    return BookingPage.build(result.bookings, total=result.total, page=result.page, limit=result.limit)


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(booking_id: str, lifecycle: BookingLifecycle = Depends(get_lifecycle)) -> BookingOut:
    return BookingOut.from_model(await lifecycle.get(booking_id))


@router.post("", response_model=BookingMessage, status_code=status.HTTP_201_CREATED)
async def create_booking(payload: BookingCreateBody, lifecycle: BookingLifecycle = Depends(get_lifecycle)) -> BookingMessage:
    booking = await lifecycle.create(
        {"name": payload.client_name, "email": payload.client_email, "phone": payload.client_phone},
        payload.service_id,
        payload.appointment_date,
        payload.appointment_time,
        payload.notes,
    )
    return BookingMessage(message="Booking created successfully", booking=BookingOut.from_model(booking))


@router.patch("/{booking_id}/status", response_model=BookingMessage, dependencies=[Depends(require_admin)])
async def update_booking_status(
    booking_id: str, payload: StatusUpdateBody, lifecycle: BookingLifecycle = Depends(get_lifecycle)
) -> BookingMessage:
    booking = await lifecycle.update_status(booking_id, payload.status)
    return BookingMessage(message="Booking status updated successfully", booking=BookingOut.from_model(booking))


@router.patch("/{booking_id}/cancel", response_model=BookingMessage)
async def cancel_booking(
    booking_id: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    notifier: Notifier = Depends(get_notifier),
) -> BookingMessage:
    booking = await lifecycle.cancel(booking_id)
    await emit(notifier, NotificationEvent.BOOKING_CANCELLED, booking)
    return BookingMessage(message="Booking cancelled successfully", booking=BookingOut.from_model(booking))
