from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional

# --- Incoming Request Models ---

class BookingSubmission(BaseModel):
    """
    Raw booking form as posted by the front-end.
    Every field is optional here; presence and format are checked by
    app.services.validation so the client gets our own error messages.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    serviceType: Optional[str] = None
    sqft: Optional[str] = None
    preferredDate: Optional[str] = None
    preferredTime: Optional[str] = None
    notes: Optional[str] = None
    website: Optional[str] = None  # honeypot

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_str(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)


# --- Outgoing Response Models ---

class BookingResponse(BaseModel):
    ok: bool = True
    message: str

class ErrorResponse(BaseModel):
    ok: bool = False
    error: str

class HealthResponse(BaseModel):
    ok: bool = True
    brand: str = Field(...)
