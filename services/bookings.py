"""
Booking lifecycle: creation with slot-conflict detection, and status changes.

Status graph::

    pending -> confirmed -> completed
    pending | confirmed -> cancelled

``completed`` and ``cancelled`` are terminal. Administrative status updates
and client cancellations both go through ``_transition`` so the graph is
enforced in one place.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError

from core.clock import Clock
from core.errors import ConflictError, InvalidArgumentError, InvalidStateError, NotFoundError, ValidationError
from models.booking import (
    ACTIVE_STATUSES,
    DEFAULT_NOTES,
    Booking,
    BookingStatus,
    ServiceSnapshot,
    can_transition,
    date_to_datetime,
    slot_key,
)
from repositories.bookings import BookingRepository
from schemas.bookings import BookingRequest, ClientInfo
from services.catalog import ServiceCatalog
from services.notifications import NotificationEvent, Notifier, emit


logger = logging.getLogger(__name__)

SLOT_TAKEN = "This time slot is already booked. Please select a different time."
MAX_PAGE_SIZE = 100

_FIELD_MESSAGES = {
    "client": "Client details are required",
    "client.name": "Name must be between 2 and 100 characters",
    "client.email": "Please provide a valid email address",
    "client.phone": "Please provide a valid phone number",
    "service_id": "Please select a valid service",
    "appointment_date": "Please provide a valid date (YYYY-MM-DD)",
    "appointment_time": "Please provide a valid time in HH:MM format",
    "notes": "Notes cannot exceed 500 characters",
}


def _validation_details(exc: PydanticValidationError) -> List[dict]:
    details = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"])
        details.append({"field": field, "message": _FIELD_MESSAGES.get(field, err["msg"])})
    return details


@dataclass(frozen=True)
class BookingList:
    bookings: List[Booking]
    total: int
    page: int
    limit: int


class BookingLifecycle:
    def __init__(
        self,
        repo: BookingRepository,
        catalog: ServiceCatalog,
        notifier: Notifier,
        clock: Clock,
    ) -> None:
        self.repo = repo
        self.catalog = catalog
        self.notifier = notifier
        self.clock = clock

    async def create(
        self,
        client: Union[ClientInfo, Mapping[str, Any]],
        service_id: Any,
        appointment_date: Any,
        appointment_time: Any,
        notes: Optional[str] = None,
    ) -> Booking:
        request = self._validate(client, service_id, appointment_date, appointment_time, notes)

        if date_to_datetime(request.appointment_date) <= self.clock.now():
            raise ValidationError(
                details=[{"field": "appointment_date", "message": "Appointment date must be in the future"}]
            )

        service = await self.catalog.resolve(request.service_id)

        existing = await self.repo.find_active_at(request.appointment_date, request.appointment_time)
        if existing is not None:
            logger.info(
                "bookings.create.conflict",
                extra={"date": request.appointment_date.isoformat(), "time": request.appointment_time},
            )
            raise ConflictError(SLOT_TAKEN, self._slot(request))

        booking = Booking(
            client_name=request.client.name,
            client_email=str(request.client.email),
            client_phone=request.client.phone,
            service_id=service.id,
            service=ServiceSnapshot.of(service),
            appointment_date=request.appointment_date,
            appointment_time=request.appointment_time,
            notes=request.notes or DEFAULT_NOTES,
            status=BookingStatus.pending,
            total_amount=service.price,
            slot_key=slot_key(request.appointment_date, request.appointment_time),
        )
        try:
            booking = await self.repo.insert(booking)
        except DuplicateKeyError:
            # Another request took the slot between the check and the insert
            logger.warning("bookings.create.race_lost", extra=self._slot(request))
            raise ConflictError(SLOT_TAKEN, self._slot(request))

        logger.info(
            "bookings.create.success",
            extra={"booking_id": str(booking.id), "service_id": str(service.id), **self._slot(request)},
        )
        await emit(self.notifier, NotificationEvent.BOOKING_CREATED, booking)
        await emit(self.notifier, NotificationEvent.ADMIN_NEW_BOOKING, booking)
        return booking

    async def get(self, booking_id: Any) -> Booking:
        booking = await self.repo.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def update_status(self, booking_id: Any, new_status: Any) -> Booking:
        target = self._parse_status(new_status)
        booking = await self.get(booking_id)
        return await self._transition(booking, target)

    async def cancel(self, booking_id: Any) -> Booking:
        booking = await self.get(booking_id)
        current = BookingStatus(booking.status)
        if current is BookingStatus.cancelled:
            raise InvalidStateError("Booking is already cancelled")
        if current is BookingStatus.completed:
            raise InvalidStateError("Cannot cancel completed booking")
        return await self._transition(booking, BookingStatus.cancelled)

    async def list(
        self,
        *,
        status: Optional[Any] = None,
        appointment_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> BookingList:
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(
                details=[{"field": "page/limit", "message": f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}"}]
            )
        parsed_status = self._parse_status(status) if status else None
        query = self.repo.build_filter(parsed_status, appointment_date)
        bookings, total = await self.repo.page(query, page=page, limit=limit)
        return BookingList(bookings=bookings, total=total, page=page, limit=limit)

    async def _transition(self, booking: Booking, target: BookingStatus) -> Booking:
        current = BookingStatus(booking.status)
        if not can_transition(current, target):
            raise InvalidStateError(
                f"Cannot change booking status from {current.value} to {target.value}",
                {"from": current.value, "to": target.value},
            )
        updated = await self.repo.compare_and_set_status(
            booking.id, current, target, release_slot=target not in ACTIVE_STATUSES
        )
        if updated is None:
            raise InvalidStateError(
                "Booking status was changed by another request; reload and try again",
                {"from": current.value, "to": target.value},
            )
        logger.info(
            "bookings.status_changed",
            extra={"booking_id": str(booking.id), "from": current.value, "to": target.value},
        )
        return updated

    @staticmethod
    def _parse_status(value: Any) -> BookingStatus:
        try:
            return BookingStatus(value)
        except ValueError:
            allowed = [s.value for s in BookingStatus]
            raise InvalidArgumentError(
                f"Invalid status. Must be one of: {', '.join(allowed)}",
                {"status": value, "allowed": allowed},
            )

    @staticmethod
    def _validate(client, service_id, appointment_date, appointment_time, notes) -> BookingRequest:
        if isinstance(client, ClientInfo):
            client = client.model_dump()
        try:
            return BookingRequest(
                client=client,
                service_id=str(service_id) if service_id is not None else None,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                notes=notes,
            )
        except PydanticValidationError as exc:
            raise ValidationError(details=_validation_details(exc)) from None

    @staticmethod
    def _slot(request: BookingRequest) -> dict:
        return {"date": request.appointment_date.isoformat(), "time": request.appointment_time}
