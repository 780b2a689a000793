import pytest

from app.core.errors import PayloadTooLargeError, StorageError, ValidationError
from app.models.api_models import BookingSubmission
from app.services.booking_service import (
    HONEYPOT_MESSAGE,
    SUCCESS_MESSAGE,
    BookingService,
    utc_timestamp,
)
from app.services.validation import validate_submission
from fakes import FakeMailer, FakeStore


def _ics_value(attachment, key):
    for line in attachment.content.split("\r\n"):
        if line.startswith(f"{key}:"):
            return line[len(key) + 1:]
    return None


@pytest.mark.asyncio
async def test_valid_submission_persists_once_and_notifies(booking_service, store, mailer, submission):
    arrival = utc_timestamp()

    message = await booking_service.submit(submission)

    assert message == SUCCESS_MESSAGE
    assert len(store.rows) == 1
    saved = store.rows[0]
    assert (saved.name, saved.email, saved.phone, saved.address) == ("Jo", "jo@x.com", "555-1212", "1 Main St")
    assert (saved.service_type, saved.preferred_date, saved.preferred_time) == ("Driveway", "2025-06-01", "09:00")
    assert saved.sqft is None
    assert saved.created_at >= arrival
    assert saved.created_at.endswith("Z")

    recipients = [m["recipient"] for m in mailer.sent]
    assert recipients == ["owner@example.com", "jo@x.com"]
    assert all(m["sender"] == "bookings@example.com" for m in mailer.sent)

@pytest.mark.asyncio
async def test_emails_carry_calendar(booking_service, mailer, submission):
    await booking_service.submit(submission)

    owner, customer = mailer.sent
    assert owner["subject"] == "New Booking - Jo - Driveway"
    assert "Name: Jo" in owner["body"]
    assert "Sq Ft: N/A" in owner["body"]
    assert customer["subject"] == "Thanks! We received your request - Pressure Washing"
    assert customer["body"].startswith("Hi Jo,")
    assert "Driveway at 1 Main St on 2025-06-01 at 09:00" in customer["body"]

    for mail in (owner, customer):
        (attachment,) = mail["attachments"]
        assert attachment.filename == "booking.ics"
        assert attachment.content_type == "text/calendar"
        assert _ics_value(attachment, "DTSTART") == "20250601T160000Z"
        assert _ics_value(attachment, "DTEND") == "20250601T170000Z"
        assert _ics_value(attachment, "SUMMARY") == "Pressure Washing - Driveway"

@pytest.mark.asyncio
async def test_honeypot_short_circuits(booking_service, store, mailer, valid_form):
    submission = BookingSubmission.model_validate({**valid_form, "website": "http://spam.biz"})

    assert await booking_service.submit(submission) == HONEYPOT_MESSAGE
    assert store.rows == []
    assert mailer.sent == []

@pytest.mark.asyncio
async def test_honeypot_wins_over_missing_fields(booking_service, store):
    submission = BookingSubmission.model_validate({"website": "bot"})
    assert await booking_service.submit(submission) == HONEYPOT_MESSAGE
    assert store.rows == []

@pytest.mark.asyncio
@pytest.mark.parametrize("override", [
    {"name": ""},
    {"email": "not-an-email"},
    {"phone": "abc"},
    {"preferredTime": "  "},
])
async def test_invalid_submission_persists_nothing(booking_service, store, mailer, valid_form, override):
    with pytest.raises(ValidationError):
        await booking_service.submit(BookingSubmission.model_validate({**valid_form, **override}))
    assert store.rows == []
    assert mailer.sent == []

@pytest.mark.asyncio
async def test_storage_failure_sends_nothing(mailer, test_settings, submission):
    service = BookingService(store=FakeStore(fail=True), mailer=mailer, settings=test_settings)
    with pytest.raises(StorageError):
        await service.submit(submission)
    assert mailer.sent == []

@pytest.mark.asyncio
async def test_notification_failure_keeps_booking(store, test_settings, submission):
    mailer = FakeMailer(fail_for={"owner@example.com"})
    service = BookingService(store=store, mailer=mailer, settings=test_settings)

    assert await service.submit(submission) == SUCCESS_MESSAGE
    assert len(store.rows) == 1
    # customer confirmation still goes out
    assert [m["recipient"] for m in mailer.sent] == ["jo@x.com"]

@pytest.mark.asyncio
async def test_owner_email_skipped_without_to_email(store, mailer, test_settings, submission):
    settings = test_settings.model_copy(update={"TO_EMAIL": ""})
    service = BookingService(store=store, mailer=mailer, settings=settings)

    await service.submit(submission)
    assert [m["recipient"] for m in mailer.sent] == ["jo@x.com"]

@pytest.mark.asyncio
async def test_sender_falls_back_to_smtp_user(store, mailer, test_settings, submission):
    settings = test_settings.model_copy(update={"FROM_EMAIL": ""})
    service = BookingService(store=store, mailer=mailer, settings=settings)

    await service.submit(submission)
    assert {m["sender"] for m in mailer.sent} == {"mailer@example.com"}

@pytest.mark.asyncio
async def test_unparseable_time_still_books_without_attachment(booking_service, store, mailer, valid_form):
    submission = BookingSubmission.model_validate({**valid_form, "preferredTime": "morning"})

    assert await booking_service.submit(submission) == SUCCESS_MESSAGE
    assert len(store.rows) == 1
    assert len(mailer.sent) == 2
    assert all(m["attachments"] == [] for m in mailer.sent)

@pytest.mark.asyncio
async def test_sqft_stored_as_integer(booking_service, store, valid_form):
    await booking_service.submit(BookingSubmission.model_validate({**valid_form, "sqft": "1500"}))
    await booking_service.submit(BookingSubmission.model_validate({**valid_form, "sqft": "big"}))
    assert [row.sqft for row in store.rows] == [1500, None]

@pytest.mark.asyncio
async def test_send_notifications_reports_delivered_count(store, test_settings, submission):
    service = BookingService(store=store, mailer=FakeMailer(fail_for={"jo@x.com"}), settings=test_settings)
    booking = validate_submission(submission)
    booking.id = 1

    assert await service.send_notifications(booking) == 1
    clean = BookingService(store=store, mailer=FakeMailer(), settings=test_settings)
    assert await clean.send_notifications(booking) == 2

def test_error_messages_default_to_public_text():
    assert StorageError().message == "Server error."
    assert StorageError("disk full").client_message == "Server error."
    assert ValidationError("Invalid phone number.").client_message == "Invalid phone number."
    assert PayloadTooLargeError().client_message == "Request too large."
    assert PayloadTooLargeError.status_code == 413
