"""
Salon API — Booking Request Schemas
====================================

What:  Pydantic models for the JSON bodies of POST and PUT /api/bookings.
Why:   Required fields are checked at the API boundary; a missing field is
       answered with 400 instead of being stored as null.

Update semantics:
    PUT is a partial update: keys absent from the body keep their stored
    value, keys present overwrite it. This is the same convention as the
    product endpoints. Required fields may not be cleared.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from salon_api.models.booking import DEFAULT_STATUS

REQUIRED_FIELDS = (
    "client_name",
    "client_phone",
    "service_id",
    "service_name",
    "stylist_id",
    "stylist_name",
    "date",
    "time",
)


class _BookingBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingCreate(_BookingBody):
    """Body of POST /api/bookings."""

    client_name: str = Field(min_length=1)
    client_phone: str = Field(min_length=1)
    client_email: Optional[str] = None
    service_id: str = Field(min_length=1)
    service_name: str = Field(min_length=1)
    stylist_id: str = Field(min_length=1)
    stylist_name: str = Field(min_length=1)
    date: str = Field(min_length=1, description="Appointment date, free text (e.g. 2024-05-01)")
    time: str = Field(min_length=1, description="Appointment time, free text (e.g. 10:00)")
    notes: Optional[str] = None
    status: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("status")
    @classmethod
    def default_status(cls, v: Optional[str]) -> str:
        return v or DEFAULT_STATUS


class BookingUpdate(_BookingBody):
    """Body of PUT /api/bookings/{id}. Every field is optional."""

    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    service_id: Optional[str] = None
    service_name: Optional[str] = None
    stylist_id: Optional[str] = None
    stylist_name: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    @model_validator(mode="after")
    def required_fields_not_cleared(self) -> "BookingUpdate":
        for name in REQUIRED_FIELDS + ("status",):
            if name in self.model_fields_set and not getattr(self, name):
                raise ValueError(f"{to_camel(name)} cannot be empty")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields sent by the client, keyed by their stored (camelCase) names."""
        return self.model_dump(by_alias=True, exclude_unset=True)
