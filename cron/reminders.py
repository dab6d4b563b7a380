from __future__ import annotations

import asyncio
import logging
import os
from datetime import timedelta
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.clock import Clock, system_clock
from core.logging_config import configure_logging
from db.database import close_database, get_database
from repositories.bookings import BookingRepository
from services.notifications import NotificationEvent, Notifier, emit, get_notifier


logger = logging.getLogger(__name__)


async def send_due_reminders(
    db: AsyncIOMotorDatabase,
    notifier: Notifier,
    clock: Clock = system_clock,
    limit: int = 200,
) -> int:
    """Email every active booking scheduled for tomorrow that has not been reminded yet."""
    repo = BookingRepository(db, clock)
    tomorrow = clock.today() + timedelta(days=1)
    due = await repo.due_for_reminder(tomorrow, limit=limit)
    logger.info("cron.reminders.due", extra={"date": tomorrow.isoformat(), "count": len(due)})

    sent = 0
    for booking in due:
        if await emit(notifier, NotificationEvent.BOOKING_REMINDER, booking):
            await repo.mark_reminded(booking.id)
            sent += 1
        else:
            # Left unstamped so the next run retries it
            logger.warning("cron.reminders.failed", extra={"booking_id": str(booking.id)})

    logger.info("cron.reminders.done", extra={"sent": sent, "due": len(due)})
    return sent


async def _run(limit: int, notifier: Optional[Notifier] = None) -> int:
    db = await get_database()
    try:
        return await send_due_reminders(db, notifier or get_notifier(), limit=limit)
    finally:
        await close_database()


def main() -> None:
    configure_logging()
    asyncio.run(_run(limit=int(os.getenv("REMINDERS_LIMIT", "200"))))


if __name__ == "__main__":
    main()
