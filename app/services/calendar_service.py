import re
import time
import uuid
import datetime
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.errors import CalendarError
from app.core.logger import logger
from app.models.db_models import Booking

UTC = ZoneInfo('UTC')
APPOINTMENT_DURATION = datetime.timedelta(hours=1)
ICS_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
TIME_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S")


def _slug(brand: str) -> str:
    return re.sub(r"[^a-z0-9]", "", brand.lower()) or "booking"

def _zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"⚠️ Unknown timezone '{tz_name}', falling back to UTC")
        return UTC

def appointment_window(preferred_date: str, preferred_time: str, tz_name: str = "UTC") -> Tuple[datetime.datetime, datetime.datetime]:
    """
    Interprets the requested local date/time in the business timezone.
    Returns (start, end) in UTC; the slot is always one hour long.
    """
    raw = f"{preferred_date} {preferred_time}".strip()
    local_start = None
    for fmt in TIME_FORMATS:
        try:
            local_start = datetime.datetime.strptime(raw, fmt)
            break
        except ValueError:
            continue

    if local_start is None:
        raise CalendarError(f"Cannot parse appointment time: {raw!r}")

    start_utc = local_start.replace(tzinfo=_zone(tz_name)).astimezone(UTC)
    return start_utc, start_utc + APPOINTMENT_DURATION

def to_ics_date(dt: datetime.datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime(ICS_DATE_FORMAT)

def escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )

def booking_summary(brand: str, service_type: str) -> str:
    return f"{brand} - {service_type}"

def booking_description(booking: Booking) -> str:
    lines = [
        f"Name: {booking.name}",
        f"Email: {booking.email}",
        f"Phone: {booking.phone}",
        f"Address: {booking.address}",
        f"Service: {booking.service_type}",
        f"Sq Ft: {booking.sqft if booking.sqft is not None else 'N/A'}",
        f"Preferred: {booking.preferred_date} {booking.preferred_time}",
    ]
    if booking.notes:
        lines.append(f"Notes: {booking.notes}")
    return "\n".join(lines)

def build_ics(summary: str, description: str, start: datetime.datetime, end: datetime.datetime,
              brand: str = "PressureWash", now: Optional[datetime.datetime] = None) -> str:
    """
    Builds a single-event VCALENDAR block (CRLF line endings).
    """
    now = now or datetime.datetime.now(UTC)
    slug = _slug(brand)
    uid = f"booking-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}@{slug}"

    return "\r\n".join([
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{slug}//Booking//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{to_ics_date(now)}",
        f"DTSTART:{to_ics_date(start)}",
        f"DTEND:{to_ics_date(end)}",
        f"SUMMARY:{escape_text(summary)}",
        f"DESCRIPTION:{escape_text(description)}",
        "END:VEVENT",
        "END:VCALENDAR",
    ])

def build_booking_ics(booking: Booking, brand: str, tz_name: str) -> str:
    """Calendar invite for a persisted booking. Raises CalendarError on bad date/time."""
    start, end = appointment_window(booking.preferred_date, booking.preferred_time, tz_name)
    return build_ics(
        summary=booking_summary(brand, booking.service_type),
        description=booking_description(booking),
        start=start,
        end=end,
        brand=brand,
    )
