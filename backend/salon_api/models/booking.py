"""
Salon API — Booking Document
=============================

What:  Shape of an appointment record in the `bookings` collection.
Why:   Used both to build new documents and as the response model of the
       booking endpoints.

Notes:
    - service_id / stylist_id are opaque strings copied from the request;
      nothing checks them against another collection.
    - date and time are free text; they are not parsed as calendar values.
    - Nothing prevents two bookings for the same stylist, date and time.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from salon_api.models.base import MongoModel

DEFAULT_STATUS = "scheduled"


class Booking(MongoModel):
    """An appointment as stored and returned by the API."""

    client_name: str
    client_phone: str
    client_email: Optional[str] = None
    service_id: str
    service_name: str
    stylist_id: str
    stylist_name: str
    date: str
    time: str
    notes: Optional[str] = None
    status: str = DEFAULT_STATUS
    created_at: datetime = Field(description="Set once when the booking is created (UTC)")
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Set on every update; null until the first update",
    )
