from .service import Service, ServiceCategory, ServiceDuration
from .booking import Booking, BookingStatus, PaymentStatus, ServiceSnapshot
from .staff import StaffMember, StaffRole

__all__ = [
    "Service",
    "ServiceCategory",
    "ServiceDuration",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "ServiceSnapshot",
    "StaffMember",
    "StaffRole",
]
