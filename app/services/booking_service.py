from datetime import datetime, timezone
from typing import Sequence

from app.core.config import Settings
from app.core.errors import CalendarError, NotificationError
from app.core.logger import logger
from app.models.api_models import BookingSubmission
from app.models.db_models import Booking
from app.services.calendar_service import booking_description, build_booking_ics
from app.services.db_service import BookingStore
from app.services.notification_service import Attachment, Mailer, ics_attachment
from app.services.validation import is_email, is_honeypot_filled, validate_submission

HONEYPOT_MESSAGE = "Thanks!"
SUCCESS_MESSAGE = "Booking received."


def utc_timestamp() -> str:
    """ISO-8601 UTC with milliseconds and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BookingService:
    def __init__(self, store: BookingStore, mailer: Mailer, settings: Settings):
        self.store = store
        self.mailer = mailer
        self.settings = settings

    async def submit(self, submission: BookingSubmission) -> str:
        """
        Validate -> persist -> notify. Returns the message for the client.
        Raises ValidationError before anything is stored, StorageError if the
        append fails (no email is sent then).
        """
        if is_honeypot_filled(submission):
            logger.info("🍯 Honeypot field filled, dropping submission")
            return HONEYPOT_MESSAGE

        booking = validate_submission(submission)
        booking.created_at = utc_timestamp()

        booking.id = await self.store.append(booking)
        logger.info(f"✅ Booking {booking.id} saved: {booking.name}, {booking.service_type} on {booking.preferred_date} {booking.preferred_time}")

        await self.send_notifications(booking)
        return SUCCESS_MESSAGE

    def _calendar_attachments(self, booking: Booking) -> Sequence[Attachment]:
        try:
            ics = build_booking_ics(booking, self.settings.BRAND_NAME, self.settings.BUSINESS_TIMEZONE)
        except CalendarError as e:
            logger.warning(f"⚠️ Booking {booking.id}: no calendar attachment ({e})")
            return ()
        return (ics_attachment(ics),)

    async def send_notifications(self, booking: Booking) -> int:
        """
        Owner notification then customer confirmation.
        A failed send is logged and never undoes or fails the booking.
        Returns how many emails went out.
        """
        brand = self.settings.BRAND_NAME
        sender = self.settings.sender_email
        attachments = self._calendar_attachments(booking)
        description = booking_description(booking)
        results = []

        owner_email = self.settings.TO_EMAIL
        if not owner_email:
            logger.warning("⚠️ TO_EMAIL not set, skipping owner notification")
        else:
            results.append(await self._send(
                booking, sender, owner_email,
                subject=f"New Booking - {booking.name} - {booking.service_type}",
                body=description,
                attachments=attachments,
            ))

        if is_email(booking.email):
            results.append(await self._send(
                booking, sender, booking.email,
                subject=f"Thanks! We received your request - {brand}",
                body=self.customer_body(booking),
                attachments=attachments,
            ))

        delivered = sum(results)
        if delivered < len(results):
            logger.warning(f"📧 Booking {booking.id}: {delivered}/{len(results)} notifications sent")
        return delivered

    def customer_body(self, booking: Booking) -> str:
        brand = self.settings.BRAND_NAME
        return (
            f"Hi {booking.name},\n\n"
            f"Thanks for reaching out to {brand}!\n\n"
            f"We have your request for {booking.service_type} at {booking.address} "
            f"on {booking.preferred_date} at {booking.preferred_time}. We'll confirm shortly.\n\n"
            f"- {brand}"
        )

    async def _send(self, booking: Booking, sender: str, recipient: str, subject: str, body: str,
                    attachments: Sequence[Attachment]) -> bool:
        try:
            await self.mailer.send_email(sender, recipient, subject, body, attachments)
            return True
        except NotificationError as e:
            logger.error(f"❌ Booking {booking.id}: email to {recipient} failed: {e.message}")
            return False
