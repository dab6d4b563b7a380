from __future__ import annotations

import re
from datetime import date, datetime
from math import ceil
from typing import Any, List, Optional

from bson import ObjectId
from pydantic import BaseModel, EmailStr, Field, field_validator

from models.booking import DEFAULT_NOTES, Booking, ServiceSnapshot


TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ClientInfo(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=30)

    @field_validator("name", "phone", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.lower()


class BookingRequest(BaseModel):
    """Validated shape of a new booking, before any business rules run."""

    client: ClientInfo
    service_id: str
    appointment_date: date
    appointment_time: str = Field(pattern=TIME_PATTERN)
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("service_id")
    @classmethod
    def _object_id(cls, value: str) -> str:
        if not ObjectId.is_valid(value):
            raise ValueError("Please select a valid service")
        return value

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _iso_date(cls, value: Any) -> Any:
        # Only ISO-8601 calendar dates; reject epoch numbers pydantic would otherwise accept
        if isinstance(value, (int, float)):
            raise ValueError("Appointment date must be an ISO-8601 date")
        if isinstance(value, str):
            value = value.strip()
            if DATE_PATTERN.match(value):
                return date.fromisoformat(value)
            # A full ISO timestamp is accepted for its calendar day
            return datetime.fromisoformat(value).date()
        return value

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("notes", mode="before")
    @classmethod
    def _strip_notes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value


class BookingCreateBody(BaseModel):
    # Loosely typed on purpose so shape errors surface as domain validation details
    client_name: Any = None
    client_email: Any = None
    client_phone: Any = None
    service_id: Any = Field(default=None, alias="service")
    appointment_date: Any = None
    appointment_time: Any = None
    notes: Any = None

    model_config = {"populate_by_name": True}


class StatusUpdateBody(BaseModel):
    status: str


class BookingOut(BaseModel):
    id: str
    client_name: str
    client_email: str
    client_phone: str
    service_id: str
    service: ServiceSnapshot
    appointment_date: date
    appointment_time: str
    formatted_date: str
    formatted_time: str
    notes: str = DEFAULT_NOTES
    status: str
    total_amount: float
    payment_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, booking: Booking) -> "BookingOut":
        data = booking.model_dump(exclude={"id", "service_id", "slot_key", "reminder_sent_at"})
        return cls(
            id=str(booking.id),
            service_id=str(booking.service_id),
            formatted_date=booking.formatted_date,
            formatted_time=booking.formatted_time,
            **data,
        )


class BookingMessage(BaseModel):
    message: str
    booking: BookingOut


class BookingPage(BaseModel):
    bookings: List[BookingOut]
    total: int
    total_pages: int
    current_page: int

    @classmethod
    def build(cls, bookings: List[Booking], *, total: int, page: int, limit: int) -> "BookingPage":
        return cls(
            bookings=[BookingOut.from_model(b) for b in bookings],
            total=total,
            total_pages=ceil(total / limit) if limit else 1,
            current_page=page,
        )


class AvailableSlots(BaseModel):
    appointment_date: date
    service_id: str
    available_slots: List[str]
