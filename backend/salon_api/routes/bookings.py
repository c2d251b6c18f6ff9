"""
Salon API — Booking Route Handlers
===================================

What:  HTTP surface for appointment bookings under /api/bookings.
How:   Each handler resolves the database handle, delegates to
       BookingService, and returns the model. Errors are raised as
       application exceptions and formatted by the global handlers.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from pymongo.asynchronous.database import AsyncDatabase

from salon_api.database import get_database
from salon_api.models.booking import Booking
from salon_api.schemas.booking import BookingCreate, BookingUpdate
from salon_api.schemas.common import ErrorResponse, MessageResponse
from salon_api.services.booking_service import booking_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])

_NOT_FOUND = {404: {"description": "Booking not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[Booking],
    summary="List all bookings, newest first",
)
async def list_bookings(db: AsyncDatabase = Depends(get_database)) -> List[Booking]:
    return await booking_service.list_bookings(db)


@router.get(
    "/{booking_id}",
    response_model=Booking,
    responses=_NOT_FOUND,
    summary="Get a single booking by ID",
)
async def get_booking(
    booking_id: str,
    db: AsyncDatabase = Depends(get_database),
) -> Booking:
    return await booking_service.get_booking(db, booking_id)


@router.post(
    "",
    status_code=201,
    response_model=Booking,
    responses={400: {"description": "Missing required field", "model": ErrorResponse}},
    summary="Create a booking",
    description=(
        "Creates an appointment. Status defaults to 'scheduled'. "
        "Overlapping bookings for the same stylist are not rejected."
    ),
)
async def create_booking(
    payload: BookingCreate,
    db: AsyncDatabase = Depends(get_database),
) -> Booking:
    return await booking_service.create_booking(db, payload)


@router.put(
    "/{booking_id}",
    response_model=Booking,
    responses={
        400: {"description": "Required field cleared", "model": ErrorResponse},
        **_NOT_FOUND,
    },
    summary="Update a booking",
    description="Partial update: fields omitted from the body keep their stored value.",
)
async def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    db: AsyncDatabase = Depends(get_database),
) -> Booking:
    return await booking_service.update_booking(db, booking_id, payload)


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a booking",
)
async def delete_booking(
    booking_id: str,
    db: AsyncDatabase = Depends(get_database),
) -> MessageResponse:
    await booking_service.delete_booking(db, booking_id)
    return MessageResponse(message="Booking deleted successfully")
