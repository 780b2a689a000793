from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from app.core.config import settings
from app.core.errors import PayloadTooLargeError
from app.core.logger import logger
from app.models.api_models import BookingResponse, BookingSubmission, HealthResponse
from app.services.booking_service import BookingService

router = APIRouter()


def get_booking_service(request: Request) -> BookingService:
    """Built from the store/mailer the lifespan put on app.state."""
    state = request.app.state
    return BookingService(store=state.store, mailer=state.mailer, settings=settings)


async def read_form_payload(request: Request) -> Dict[str, Any]:
    """
    Reads a JSON or form-encoded body. Anything that is not an object
    becomes an empty submission and fails the required-field check.
    Bodies over MAX_BODY_BYTES are refused with 413.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and (len(declared) > 18 or int(declared) > settings.MAX_BODY_BYTES):
        raise PayloadTooLargeError()
    body = await request.body()
    if len(body) > settings.MAX_BODY_BYTES:
        raise PayloadTooLargeError()

    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
            form = await request.form()
            return dict(form)
        payload = await request.json()
    # Starlette raises HTTPException(400) for a broken multipart body inside an app
    except (ValueError, StarletteHTTPException, MultiPartException) as e:
        logger.warning(f"⚠️ Unreadable booking body: {e}")
        return {}

    return payload if isinstance(payload, dict) else {}


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(brand=settings.BRAND_NAME)


@router.post("/bookings", response_model=BookingResponse)
async def create_booking(
    request: Request,
    booking_service: BookingService = Depends(get_booking_service),
):
    payload = await read_form_payload(request)
    submission = BookingSubmission.model_validate(payload)
    message = await booking_service.submit(submission)
    return BookingResponse(message=message)
