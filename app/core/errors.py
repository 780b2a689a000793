"""
Error taxonomy for the booking flow.

Each error carries the HTTP status and the message that is safe to show to
the client. Internal details stay in the exception chain and the logs.
"""

from typing import Optional

SERVER_ERROR_MESSAGE = "Server error."


class BookingError(Exception):
    status_code: int = 500
    public_message: str = SERVER_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def client_message(self) -> str:
        return self.public_message


class ValidationError(BookingError):
    """Missing or malformed submission field. The message is shown as-is."""
    status_code = 400

    @property
    def client_message(self) -> str:
        return self.message


class StorageError(BookingError):
    """The booking could not be persisted."""
    status_code = 500


class NotificationError(BookingError):
    """The mail transport refused or failed to deliver a message."""
    status_code = 500


class CalendarError(BookingError):
    """The appointment date/time cannot be turned into a calendar window."""
    status_code = 500


class PayloadTooLargeError(ValidationError):
    status_code = 413

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Request too large.")
