"""
Salon API — Booking Service
============================

What:  CRUD operations for appointment bookings.
Why:   Keeps database access and not-found handling out of the route handlers.
How:   Each method receives the database handle (injected per request),
       performs one MongoDB call (plus one existence check where needed) and
       returns Booking models.

Error Handling Strategy:
    - Unknown or malformed id      → NotFoundError / InvalidIdError (404)
    - Driver errors                → DatabaseError (500), details logged only
"""

import logging
from datetime import datetime, timezone
from typing import List

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from salon_api.database import BOOKINGS
from salon_api.exceptions import DatabaseError, InvalidIdError, NotFoundError
from salon_api.models.booking import Booking
from salon_api.schemas.booking import BookingCreate, BookingUpdate

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def parse_object_id(value: str, resource: str) -> ObjectId:
    """Converts a path id to an ObjectId, or raises InvalidIdError (404)."""
    if not ObjectId.is_valid(value):
        raise InvalidIdError(resource=resource, resource_id=value)
    return ObjectId(value)


class BookingService:
    """
    Business logic for bookings.

    Stateless: the database handle is passed to every call, so a single
    instance is shared by all requests.
    """

    async def list_bookings(self, db: AsyncDatabase) -> List[Booking]:
        """All bookings, newest first. No pagination."""
        try:
            documents = await db[BOOKINGS].find().sort(NEWEST_FIRST).to_list(length=None)
        except PyMongoError as e:
            logger.error("Database error listing bookings: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch bookings.") from e
        return [Booking.from_document(doc) for doc in documents]

    async def get_booking(self, db: AsyncDatabase, booking_id: str) -> Booking:
        oid = parse_object_id(booking_id, "booking")
        try:
            document = await db[BOOKINGS].find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Database error fetching booking %s: %s", booking_id, str(e))
            raise DatabaseError(
                message="Failed to fetch booking.",
                context={"booking_id": booking_id},
            ) from e

        if document is None:
            raise NotFoundError(resource="booking", resource_id=booking_id)
        return Booking.from_document(document)

    async def create_booking(self, db: AsyncDatabase, payload: BookingCreate) -> Booking:
        """
        Stores a new booking.

        Status defaults to "scheduled" (applied by BookingCreate). Double
        bookings are not checked.
        """
        booking = Booking(
            **payload.model_dump(),
            created_at=datetime.now(timezone.utc),
        )
        document = booking.to_document()
        try:
            result = await db[BOOKINGS].insert_one(document)
        except PyMongoError as e:
            logger.error("Database error creating booking: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create booking.") from e

        booking.id = str(result.inserted_id)
        logger.info("Booking created: %s (stylist=%s, %s %s)",
                    booking.id, booking.stylist_id, booking.date, booking.time)
        return booking

    async def update_booking(
        self, db: AsyncDatabase, booking_id: str, payload: BookingUpdate
    ) -> Booking:
        """
        Partial update: only the fields present in the request are written.

        Raises:
            NotFoundError when the id does not resolve; nothing is written then.
        """
        oid = parse_object_id(booking_id, "booking")
        changes = payload.changes()
        changes["updatedAt"] = datetime.now(timezone.utc)

        try:
            document = await db[BOOKINGS].find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Database error updating booking %s: %s", booking_id, str(e))
            raise DatabaseError(
                message="Failed to update booking.",
                context={"booking_id": booking_id},
            ) from e

        if document is None:
            raise NotFoundError(resource="booking", resource_id=booking_id)

        logger.info("Booking updated: %s (fields=%s)", booking_id, sorted(changes))
        return Booking.from_document(document)

    async def delete_booking(self, db: AsyncDatabase, booking_id: str) -> None:
        """Permanently removes a booking. There is no soft delete."""
        oid = parse_object_id(booking_id, "booking")
        try:
            result = await db[BOOKINGS].delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Database error deleting booking %s: %s", booking_id, str(e))
            raise DatabaseError(
                message="Failed to delete booking.",
                context={"booking_id": booking_id},
            ) from e

        if result.deleted_count == 0:
            raise NotFoundError(resource="booking", resource_id=booking_id)
        logger.info("Booking deleted: %s", booking_id)


booking_service = BookingService()
