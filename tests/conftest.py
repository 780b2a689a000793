import pytest

from app.core.config import Settings
from app.models.api_models import BookingSubmission
from app.services.booking_service import BookingService
from fakes import FakeMailer, FakeStore

VALID_FORM = {
    "name": "Jo",
    "email": "jo@x.com",
    "phone": "555-1212",
    "address": "1 Main St",
    "serviceType": "Driveway",
    "preferredDate": "2025-06-01",
    "preferredTime": "09:00",
}


@pytest.fixture
def valid_form():
    return dict(VALID_FORM)

@pytest.fixture
def submission(valid_form):
    return BookingSubmission.model_validate(valid_form)

@pytest.fixture
def test_settings():
    return Settings(
        BRAND_NAME="Pressure Washing",
        BUSINESS_TIMEZONE="America/Los_Angeles",
        SMTP_HOST="smtp.example.com",
        SMTP_USER="mailer@example.com",
        SMTP_PASS="secret",
        FROM_EMAIL="bookings@example.com",
        TO_EMAIL="owner@example.com",
    )

@pytest.fixture
def store():
    return FakeStore()

@pytest.fixture
def mailer():
    return FakeMailer()

@pytest.fixture
def booking_service(store, mailer, test_settings):
    return BookingService(store=store, mailer=mailer, settings=test_settings)
