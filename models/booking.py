from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .base import MongoModel, PyObjectId
from .service import Service, ServiceCategory, ServiceDuration


DEFAULT_NOTES = "No special requests"


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


# Statuses that occupy a slot
ACTIVE_STATUSES: FrozenSet[BookingStatus] = frozenset({BookingStatus.pending, BookingStatus.confirmed})

TRANSITIONS: Mapping[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.pending: frozenset({BookingStatus.confirmed, BookingStatus.cancelled}),
    BookingStatus.confirmed: frozenset({BookingStatus.completed, BookingStatus.cancelled}),
    BookingStatus.completed: frozenset(),
    BookingStatus.cancelled: frozenset(),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS[current]


def slot_key(appointment_date: date, appointment_time: str) -> str:
    return f"{appointment_date.isoformat()}T{appointment_time}"


def date_to_datetime(value: date) -> datetime:
    # BSON has no calendar-date type; dates are stored at local midnight
    return datetime.combine(value, time.min)


class ServiceSnapshot(BaseModel):
    """Copy of a service's fields taken when the booking was made."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str
    price: float
    duration: ServiceDuration
    category: ServiceCategory

    @classmethod
    def of(cls, service: Service) -> "ServiceSnapshot":
        return cls(
            name=service.name,
            price=service.price,
            duration=service.duration,
            category=service.category,
        )


class Booking(MongoModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    client_name: str
    client_email: str
    client_phone: str
    service_id: PyObjectId
    service: ServiceSnapshot
    appointment_date: date
    appointment_time: str
    notes: str = DEFAULT_NOTES
    status: BookingStatus = BookingStatus.pending
    total_amount: float
    payment_status: PaymentStatus = PaymentStatus.pending
    slot_key: Optional[str] = None
    reminder_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _stored_datetime_to_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        return value

    @property
    def is_active(self) -> bool:
        return BookingStatus(self.status) in ACTIVE_STATUSES

    @property
    def formatted_date(self) -> str:
        # e.g. "Tuesday, October 20, 2026"
        d = self.appointment_date
        return f"{d:%A}, {d:%B} {d.day}, {d.year}"

    @property
    def formatted_time(self) -> str:
        hours, minutes = self.appointment_time.split(":")
        hour = int(hours)
        suffix = "PM" if hour >= 12 else "AM"
        return f"{hour % 12 or 12}:{minutes} {suffix}"

    def to_document(self) -> Dict[str, Any]:
        doc = super().to_document()
        doc["appointment_date"] = date_to_datetime(self.appointment_date)
        if doc.get("slot_key") is None:
            # Absent, not null, so the sparse unique index ignores inactive bookings
            doc.pop("slot_key", None)
        return doc
