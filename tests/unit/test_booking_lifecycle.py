"""Unit tests for booking creation, status changes and listing."""
from datetime import date

import pytest
from bson import ObjectId

from core.errors import ConflictError, InvalidArgumentError, InvalidStateError, NotFoundError, ValidationError
from models.booking import BookingStatus
from repositories.bookings import BOOKINGS
from services.bookings import SLOT_TAKEN, BookingLifecycle
from services.notifications import NotificationEvent

from tests.conftest import CLIENT, NOW, TOMORROW, RecordingNotifier, day_after, service_payload


def _fields(exc: ValidationError):
    return {d["field"]: d["message"] for d in exc.details}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_books_a_pending_slot(lifecycle, haircut, notifier, db):
    booking = await lifecycle.create(CLIENT, haircut.id, "2026-10-20", "10:00", "Please use the side door")

    assert booking.id is not None
    assert booking.status == "pending"
    assert booking.payment_status == "pending"
    assert booking.client_email == "jane.doe@example.com"
    assert booking.appointment_date == TOMORROW
    assert booking.total_amount == 50.0
    assert booking.service.name == "Haircut"
    assert booking.service.duration.minutes == 60
    assert booking.notes == "Please use the side door"
    assert booking.slot_key == "2026-10-20T10:00"
    assert booking.created_at == NOW

    assert await db[BOOKINGS].count_documents({}) == 1
    assert notifier.kinds() == [NotificationEvent.BOOKING_CREATED, NotificationEvent.ADMIN_NEW_BOOKING]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_blank_notes_fall_back_to_default(lifecycle, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00", "   ")
    assert booking.notes == "No special requests"


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("when", [date(2026, 10, 18), date(2026, 10, 19)])
async def test_past_and_same_day_dates_are_rejected(lifecycle, haircut, when):
    with pytest.raises(ValidationError) as exc_info:
        await lifecycle.create(CLIENT, haircut.id, when, "10:00")
    assert _fields(exc_info.value) == {"appointment_date": "Appointment date must be in the future"}


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("bad_time", ["25:00", "9:60", "9:00", "24:00", "10:5", "noon", ""])
async def test_malformed_times_are_rejected(lifecycle, haircut, bad_time):
    with pytest.raises(ValidationError) as exc_info:
        await lifecycle.create(CLIENT, haircut.id, TOMORROW, bad_time)
    assert "appointment_time" in _fields(exc_info.value)


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("good_time", ["00:00", "09:00", "23:59"])
async def test_well_formed_times_are_accepted(lifecycle, haircut, good_time):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, good_time)
    assert booking.appointment_time == good_time


@pytest.mark.unit
@pytest.mark.asyncio
async def test_client_details_are_validated(lifecycle, haircut):
    client = {"name": "J", "email": "not-an-email", "phone": "123"}
    with pytest.raises(ValidationError) as exc_info:
        await lifecycle.create(client, haircut.id, TOMORROW, "10:00")
    fields = _fields(exc_info.value)
    assert fields["client.name"] == "Name must be between 2 and 100 characters"
    assert fields["client.email"] == "Please provide a valid email address"
    assert fields["client.phone"] == "Please provide a valid phone number"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unparseable_inputs_are_validation_errors(lifecycle):
    with pytest.raises(ValidationError) as exc_info:
        await lifecycle.create(CLIENT, "nope", "20/10/2026", "10:00", "x" * 501)
    fields = _fields(exc_info.value)
    assert fields["service_id"] == "Please select a valid service"
    assert fields["appointment_date"] == "Please provide a valid date (YYYY-MM-DD)"
    assert fields["notes"] == "Notes cannot exceed 500 characters"


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw", ["2026-10-20garbage", "2026-10-20 not a date", "2026-10-20T99:99", "2026-02-30", "20261020x", 1792454400]
)
async def test_date_with_trailing_junk_is_rejected(lifecycle, haircut, db, raw):
    with pytest.raises(ValidationError) as exc_info:
        await lifecycle.create(CLIENT, haircut.id, raw, "10:00")
    assert _fields(exc_info.value)["appointment_date"] == "Please provide a valid date (YYYY-MM-DD)"
    assert await db[BOOKINGS].count_documents({}) == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_full_iso_timestamp_books_its_calendar_day(lifecycle, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, "2026-10-20T00:00:00", "10:00")
    assert booking.appointment_date == TOMORROW


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unknown_service_is_not_found(lifecycle, notifier, db):
    with pytest.raises(NotFoundError):
        await lifecycle.create(CLIENT, ObjectId(), TOMORROW, "10:00")
    assert await db[BOOKINGS].count_documents({}) == 0
    assert notifier.events == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_second_booking_for_same_slot_conflicts(lifecycle, haircut, catalog, db):
    facial = await catalog.create(service_payload(name="Facial", category="Skincare", price=80))
    await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")

    with pytest.raises(ConflictError) as exc_info:
        await lifecycle.create(
            {"name": "Bob Smith", "email": "bob@example.com", "phone": "555-000-1111"},
            facial.id,
            TOMORROW,
            "10:00",
        )
    assert exc_info.value.message == SLOT_TAKEN
    assert exc_info.value.details == {"date": "2026-10-20", "time": "10:00"}
    assert await db[BOOKINGS].count_documents({}) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unique_slot_index_rejects_a_lost_race(lifecycle, haircut, db, monkeypatch):
    await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")

    async def _nothing_there(*args, **kwargs):
        return None

    # Simulate a concurrent request that passed the check before the first insert landed
    monkeypatch.setattr(lifecycle.repo, "find_active_at", _nothing_there)
    with pytest.raises(ConflictError):
        await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    assert await db[BOOKINGS].count_documents({}) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_slot_can_be_rebooked_after_cancellation(lifecycle, haircut):
    first = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    cancelled = await lifecycle.cancel(first.id)
    assert cancelled.slot_key is None

    again = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    assert again.id != first.id
    assert again.status == "pending"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_notifier_failure_does_not_fail_the_booking(booking_repo, catalog, clock, haircut, db):
    failing = RecordingNotifier(fail=True)
    lifecycle = BookingLifecycle(booking_repo, catalog, failing, clock)

    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    assert booking.status == "pending"
    assert len(failing.events) == 2
    assert await db[BOOKINGS].count_documents({}) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_snapshot_survives_service_edits_and_deletion(lifecycle, catalog, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    await catalog.update(haircut.id, service_payload(name="Deluxe Haircut", price=75))
    await catalog.delete(haircut.id)

    stored = await lifecycle.get(booking.id)
    assert stored.service.name == "Haircut"
    assert stored.service.price == 50.0
    assert stored.total_amount == 50.0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_status_walks_the_happy_path(lifecycle, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")

    confirmed = await lifecycle.update_status(booking.id, "confirmed")
    assert confirmed.status == "confirmed"
    assert confirmed.slot_key == "2026-10-20T10:00"

    completed = await lifecycle.update_status(str(booking.id), "completed")
    assert completed.status == "completed"
    assert completed.slot_key is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unknown_status_is_invalid_argument(lifecycle, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    with pytest.raises(InvalidArgumentError) as exc_info:
        await lifecycle.update_status(booking.id, "archived")
    assert exc_info.value.message == "Invalid status. Must be one of: pending, confirmed, completed, cancelled"
    assert (await lifecycle.get(booking.id)).status == "pending"


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,illegal",
    [
        ([], "completed"),
        ([], "pending"),
        (["confirmed"], "pending"),
        (["confirmed", "completed"], "cancelled"),
        (["cancelled"], "confirmed"),
    ],
)
async def test_illegal_transitions_are_invalid_state(lifecycle, haircut, path, illegal):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    for step in path:
        await lifecycle.update_status(booking.id, step)
    with pytest.raises(InvalidStateError):
        await lifecycle.update_status(booking.id, illegal)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cancel_twice_is_invalid_state(lifecycle, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    await lifecycle.cancel(booking.id)
    with pytest.raises(InvalidStateError) as exc_info:
        await lifecycle.cancel(booking.id)
    assert exc_info.value.message == "Booking is already cancelled"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cancel_completed_is_invalid_state(lifecycle, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    await lifecycle.update_status(booking.id, "confirmed")
    await lifecycle.update_status(booking.id, "completed")
    with pytest.raises(InvalidStateError) as exc_info:
        await lifecycle.cancel(booking.id)
    assert exc_info.value.message == "Cannot cancel completed booking"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_confirmed_booking_can_be_cancelled(lifecycle, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    await lifecycle.update_status(booking.id, "confirmed")
    assert (await lifecycle.cancel(booking.id)).status == "cancelled"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stale_status_change_is_rejected(lifecycle, haircut):
    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    await lifecycle.update_status(booking.id, "cancelled")
    # ``booking`` still says pending; the stored document no longer does
    with pytest.raises(InvalidStateError):
        await lifecycle._transition(booking, BookingStatus.confirmed)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_booking_is_not_found(lifecycle):
    with pytest.raises(NotFoundError):
        await lifecycle.get(ObjectId())
    with pytest.raises(NotFoundError):
        await lifecycle.cancel("garbage")
    with pytest.raises(NotFoundError):
        await lifecycle.update_status(ObjectId(), "confirmed")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_filters_sorts_and_pages(lifecycle, haircut):
    for when, at in [(day_after(2), "11:00"), (TOMORROW, "15:00"), (TOMORROW, "09:00"), (day_after(3), "10:00")]:
        await lifecycle.create(CLIENT, haircut.id, when, at)
    first = (await lifecycle.list()).bookings[0]
    await lifecycle.update_status(first.id, "confirmed")

    everything = await lifecycle.list()
    assert everything.total == 4
    assert [(b.appointment_date, b.appointment_time) for b in everything.bookings] == [
        (TOMORROW, "09:00"),
        (TOMORROW, "15:00"),
        (day_after(2), "11:00"),
        (day_after(3), "10:00"),
    ]

    page_two = await lifecycle.list(page=2, limit=3)
    assert page_two.total == 4
    assert len(page_two.bookings) == 1

    on_tomorrow = await lifecycle.list(appointment_date=TOMORROW)
    assert on_tomorrow.total == 2

    confirmed = await lifecycle.list(status="confirmed")
    assert [b.id for b in confirmed.bookings] == [first.id]

    with pytest.raises(InvalidArgumentError):
        await lifecycle.list(status="archived")
    with pytest.raises(ValidationError):
        await lifecycle.list(limit=0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_full_scenario(lifecycle, availability, haircut):
    """Book, confirm, fail to double-book, complete, then rebook the freed slot."""
    slots = await availability.available_slots(TOMORROW, haircut.id)
    assert len(slots) == 18

    booking = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    assert "10:00" not in await availability.available_slots(TOMORROW, haircut.id)

    await lifecycle.update_status(booking.id, "confirmed")
    with pytest.raises(ConflictError):
        await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")

    await lifecycle.update_status(booking.id, "completed")
    assert "10:00" in await availability.available_slots(TOMORROW, haircut.id)
    rebooked = await lifecycle.create(CLIENT, haircut.id, TOMORROW, "10:00")
    assert rebooked.status == "pending"
