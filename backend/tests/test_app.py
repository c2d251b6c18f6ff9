"""
Salon API — Application-Level Tests
====================================

What:  Health endpoint, global exception handlers, and request IDs.

What we test:
    ✅ /health reports database and media host status
    ✅ Driver failures → 500 with a generic message
    ✅ Unexpected exceptions → 500 {"message": "Something went wrong!", "error": ...}
    ✅ Every response carries X-Request-ID
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from pymongo.errors import ServerSelectionTimeoutError

from salon_api.database import BOOKINGS
from salon_api.main import create_app
from salon_api.services.booking_service import booking_service


async def _health(mongo):
    app = create_app()
    if mongo is not None:
        app.state.mongo = mongo
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get("/health")


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self):
        mongo = AsyncMock()
        mongo.ping.return_value = True

        response = await _health(mongo)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["media"] == "configured"
        assert data["version"]

    @pytest.mark.asyncio
    async def test_database_unreachable(self):
        mongo = AsyncMock()
        mongo.ping.return_value = False

        response = await _health(mongo)

        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_media_not_configured_is_degraded(self):
        mongo = AsyncMock()
        mongo.ping.return_value = True

        with patch("salon_api.routes.health.settings") as mock_settings:
            mock_settings.media_configured = False
            response = await _health(mongo)

        assert response.json()["status"] == "degraded"
        assert response.json()["media"] == "not_configured"


class TestErrorHandling:

    @pytest.mark.asyncio
    async def test_database_error_is_generic_500(self, test_client, fake_db):
        fake_db[BOOKINGS].fail_next = ServerSelectionTimeoutError("localhost:27017 refused")

        response = await test_client.get("/api/bookings")

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "Failed to fetch bookings."
        assert "27017" not in response.text

    @pytest.mark.asyncio
    async def test_unexpected_error_fallback(self, test_client):
        with patch.object(booking_service, "list_bookings", AsyncMock(side_effect=RuntimeError("boom"))):
            response = await test_client.get("/api/bookings")

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "Something went wrong!"
        assert data["error"] == "boom"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/api/bookings")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_error_body_includes_request_id(self, test_client):
        response = await test_client.get(
            "/api/bookings/not-an-id", headers={"X-Request-ID": "trace-1"}
        )
        assert response.json()["request_id"] == "trace-1"
