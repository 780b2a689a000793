import re
from typing import Any, Optional

from app.core.errors import ValidationError
from app.models.api_models import BookingSubmission
from app.models.db_models import Booking

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[0-9\-\+\(\)\s]{7,}$")
LEADING_INT_RE = re.compile(r"^\s*([+-]?)0*(\d+)")

# Signed 64-bit, the widest value an INTEGER column holds
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1
INT_MAX_DIGITS = len(str(INT_MAX))

LONG_TEXT_LIMIT = 2000
SHORT_TEXT_LIMIT = 200

REQUIRED_FIELDS = (
    "name", "email", "phone", "address",
    "serviceType", "preferredDate", "preferredTime",
)

MISSING_FIELDS_MESSAGE = "Missing required fields."
INVALID_EMAIL_MESSAGE = "Invalid email address."
INVALID_PHONE_MESSAGE = "Invalid phone number."


def is_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value))

def is_phone(value: Any) -> bool:
    return isinstance(value, str) and bool(PHONE_RE.match(value))

def sanitize_text(value: Any) -> str:
    """Trim and cap free text (address, notes)."""
    return str(value or "").strip()[:LONG_TEXT_LIMIT]

def sanitize_small_text(value: Any) -> str:
    return str(value or "").strip()[:SHORT_TEXT_LIMIT]

def to_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """
    Parses the leading integer of a value ("1200 sqft" -> 1200, "12.5" -> 12).
    Anything without one, or outside the signed 64-bit range, yields
    `default`; this never raises.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if INT_MIN <= value <= INT_MAX else default

    match = LEADING_INT_RE.match(str(value))
    if not match:
        return default
    sign, digits = match.groups()
    # checked before int() so huge digit runs never reach the str->int limit
    if len(digits) > INT_MAX_DIGITS:
        return default
    number = int(sign + digits)
    return number if INT_MIN <= number <= INT_MAX else default


def is_honeypot_filled(submission: BookingSubmission) -> bool:
    return bool((submission.website or "").strip())

def missing_fields(submission: BookingSubmission) -> list:
    return [
        field for field in REQUIRED_FIELDS
        if not (getattr(submission, field) or "").strip()
    ]

def validate_submission(submission: BookingSubmission) -> Booking:
    """
    Checks required fields, then email, then phone, and returns the
    sanitized booking. Raises ValidationError on the first failing check.
    """
    if missing_fields(submission):
        raise ValidationError(MISSING_FIELDS_MESSAGE)

    if not is_email(submission.email.strip()):
        raise ValidationError(INVALID_EMAIL_MESSAGE)
    if not is_phone(submission.phone.strip()):
        raise ValidationError(INVALID_PHONE_MESSAGE)

    notes = sanitize_text(submission.notes)

    return Booking(
        name=sanitize_small_text(submission.name),
        email=sanitize_small_text(submission.email),
        phone=sanitize_small_text(submission.phone),
        address=sanitize_text(submission.address),
        service_type=sanitize_small_text(submission.serviceType),
        sqft=to_int(submission.sqft),
        preferred_date=sanitize_small_text(submission.preferredDate),
        preferred_time=sanitize_small_text(submission.preferredTime),
        notes=notes or None,
    )
