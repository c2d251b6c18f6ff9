"""
Salon API — Booking Service Unit Tests
=======================================

What:  Tests for BookingService CRUD against the in-memory database double.

What we test:
    ✅ Create stores every field and defaults status to "scheduled"
    ✅ List returns newest first
    ✅ Unknown and malformed ids raise NotFoundError
    ✅ Partial update keeps omitted fields and sets updatedAt
    ✅ Update/delete of unknown ids change nothing
    ✅ Driver errors become DatabaseError
"""

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from salon_api.database import BOOKINGS
from salon_api.exceptions import DatabaseError, InvalidIdError, NotFoundError
from salon_api.schemas.booking import BookingCreate, BookingUpdate
from salon_api.services.booking_service import BookingService


class TestBookingServiceCreate:

    def setup_method(self):
        self.service = BookingService()

    @pytest.mark.asyncio
    async def test_create_defaults_status(self, fake_db, sample_booking_payload):
        booking = await self.service.create_booking(
            fake_db, BookingCreate(**sample_booking_payload)
        )

        assert booking.id is not None
        assert booking.status == "scheduled"
        assert booking.created_at is not None
        assert booking.updated_at is None

        stored = fake_db[BOOKINGS].documents[0]
        assert stored["clientName"] == "A"
        assert stored["stylistName"] == "Jo"
        assert stored["status"] == "scheduled"
        assert "updatedAt" not in stored

    @pytest.mark.asyncio
    async def test_create_keeps_explicit_status(self, fake_db, sample_booking_payload):
        payload = BookingCreate(**sample_booking_payload, status="confirmed")
        booking = await self.service.create_booking(fake_db, payload)
        assert booking.status == "confirmed"

    @pytest.mark.asyncio
    async def test_create_then_get_round_trips_fields(self, fake_db, sample_booking_payload):
        payload = BookingCreate(
            **sample_booking_payload, clientEmail="a@example.com", notes="Window seat"
        )
        created = await self.service.create_booking(fake_db, payload)

        fetched = await self.service.get_booking(fake_db, created.id)

        assert fetched.id == created.id
        assert fetched.client_email == "a@example.com"
        assert fetched.notes == "Window seat"
        assert fetched.date == "2024-05-01"
        assert fetched.time == "10:00"

    @pytest.mark.asyncio
    async def test_double_booking_is_allowed(self, fake_db, sample_booking_payload):
        """Same stylist, date and time twice: no overlap check exists."""
        await self.service.create_booking(fake_db, BookingCreate(**sample_booking_payload))
        await self.service.create_booking(fake_db, BookingCreate(**sample_booking_payload))
        assert len(fake_db[BOOKINGS].documents) == 2


class TestBookingServiceRead:

    def setup_method(self):
        self.service = BookingService()

    @pytest.mark.asyncio
    async def test_list_newest_first(self, fake_db, sample_booking_payload):
        first = await self.service.create_booking(
            fake_db, BookingCreate(**{**sample_booking_payload, "clientName": "First"})
        )
        second = await self.service.create_booking(
            fake_db, BookingCreate(**{**sample_booking_payload, "clientName": "Second"})
        )

        bookings = await self.service.list_bookings(fake_db)

        assert [b.id for b in bookings] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_list_empty(self, fake_db):
        assert await self.service.list_bookings(fake_db) == []

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, fake_db):
        with pytest.raises(NotFoundError):
            await self.service.get_booking(fake_db, str(ObjectId()))

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, fake_db):
        with pytest.raises(InvalidIdError, match="not a valid booking ID"):
            await self.service.get_booking(fake_db, "not-an-id")

    @pytest.mark.asyncio
    async def test_list_driver_error(self, fake_db):
        fake_db[BOOKINGS].fail_next = ServerSelectionTimeoutError("no servers")
        with pytest.raises(DatabaseError):
            await self.service.list_bookings(fake_db)


class TestBookingServiceUpdateDelete:

    def setup_method(self):
        self.service = BookingService()

    @pytest.mark.asyncio
    async def test_partial_update_keeps_omitted_fields(self, fake_db, sample_booking_payload):
        created = await self.service.create_booking(
            fake_db, BookingCreate(**sample_booking_payload)
        )

        updated = await self.service.update_booking(
            fake_db, created.id, BookingUpdate(time="11:30", status="completed")
        )

        assert updated.time == "11:30"
        assert updated.status == "completed"
        assert updated.client_name == "A"
        assert updated.date == "2024-05-01"
        assert updated.updated_at is not None
        assert updated.created_at == created.created_at

    @pytest.mark.asyncio
    async def test_update_unknown_id_performs_no_mutation(self, fake_db, sample_booking_payload):
        await self.service.create_booking(fake_db, BookingCreate(**sample_booking_payload))
        before = [dict(d) for d in fake_db[BOOKINGS].documents]

        with pytest.raises(NotFoundError):
            await self.service.update_booking(
                fake_db, str(ObjectId()), BookingUpdate(clientName="B")
            )

        assert fake_db[BOOKINGS].documents == before

    def test_update_rejects_clearing_required_field(self):
        with pytest.raises(ValueError, match="clientName cannot be empty"):
            BookingUpdate(clientName=None)

    def test_update_allows_clearing_optional_field(self):
        assert BookingUpdate(notes=None).changes() == {"notes": None}

    @pytest.mark.asyncio
    async def test_delete_then_get_not_found(self, fake_db, sample_booking_payload):
        created = await self.service.create_booking(
            fake_db, BookingCreate(**sample_booking_payload)
        )

        await self.service.delete_booking(fake_db, created.id)

        with pytest.raises(NotFoundError):
            await self.service.get_booking(fake_db, created.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, fake_db):
        with pytest.raises(NotFoundError):
            await self.service.delete_booking(fake_db, str(ObjectId()))
