from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class Booking(BaseModel):
    """A sanitized booking, as written to the bookings table."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[int] = Field(default=None)  # assigned by the store
    name: str
    email: str
    phone: str
    address: str
    service_type: str
    sqft: Optional[int] = None
    preferred_date: str
    preferred_time: str
    notes: Optional[str] = None
    created_at: Optional[str] = None  # stamped server-side before append

    def to_row(self) -> dict:
        """Column/value mapping for insertion (without the id)."""
        return self.model_dump(exclude={"id"})
