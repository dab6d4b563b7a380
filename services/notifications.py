from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

from core.config import AppSettings, settings as default_settings
from models.booking import Booking

from . import email_templates
from .communication import EmailService
from .email_templates import RenderedEmail


logger = logging.getLogger(__name__)


class NotificationEvent(str, Enum):
    BOOKING_CREATED = "BookingCreated"
    BOOKING_REMINDER = "BookingReminder"
    BOOKING_CANCELLED = "BookingCancelled"
    ADMIN_NEW_BOOKING = "AdminNewBooking"


class Notifier(Protocol):
    async def notify(self, event: NotificationEvent, booking: Booking) -> bool: ...


_RENDERERS: Dict[NotificationEvent, Callable[[Booking, AppSettings], RenderedEmail]] = {
    NotificationEvent.BOOKING_CREATED: email_templates.booking_created,
    NotificationEvent.BOOKING_REMINDER: email_templates.booking_reminder,
    NotificationEvent.BOOKING_CANCELLED: email_templates.booking_cancelled,
    NotificationEvent.ADMIN_NEW_BOOKING: email_templates.admin_new_booking,
}


class EmailNotifier:
    """Renders booking events to email and sends them over SMTP."""

    def __init__(self, email: Optional[EmailService] = None, config: Optional[AppSettings] = None) -> None:
        self.config = config or default_settings
        self.email = email or EmailService(self.config)

    def render(self, event: NotificationEvent, booking: Booking) -> RenderedEmail:
        return _RENDERERS[event](booking, self.config)

    async def notify(self, event: NotificationEvent, booking: Booking) -> bool:
        try:
            message = self.render(event, booking)
            # smtplib blocks; keep it off the event loop
            ok, info = await asyncio.to_thread(
                self.email.send,
                message.to,
                message.subject,
                message.text,
                message.html,
            )
        except Exception:
            logger.exception("notifications.failed", extra={"event": event.value, "booking_id": str(booking.id)})
            return False
        if ok:
            logger.info("notifications.sent", extra={"event": event.value, "booking_id": str(booking.id), "message_id": info})
        else:
            logger.warning("notifications.not_delivered", extra={"event": event.value, "booking_id": str(booking.id), "error": info})
        return ok


async def emit(notifier: Notifier, event: NotificationEvent, booking: Booking) -> bool:
    """Best-effort delivery: a failing notifier is logged, never raised."""
    try:
        return await notifier.notify(event, booking)
    except Exception:
        logger.exception("notifications.emit_failed", extra={"event": event.value, "booking_id": str(booking.id)})
        return False


_default_notifier: Optional[EmailNotifier] = None


def get_notifier() -> Notifier:
    global _default_notifier
    if _default_notifier is None:
        _default_notifier = EmailNotifier()
    return _default_notifier
