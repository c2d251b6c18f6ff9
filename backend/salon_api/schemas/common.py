"""
Salon API — Shared Response Schemas
====================================

What:  Response envelopes used across resources: delete confirmations,
       error bodies and the health check.
"""

from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Confirmation returned by DELETE endpoints."""
    message: str = Field(description="Human-readable confirmation")


class ErrorResponse(BaseModel):
    """
    Error body returned by the global exception handlers.

    Example:
        {
            "message": "Booking with ID '6650c0ffee...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Validation context (400 only)")
    error: Optional[str] = Field(default=None, description="Underlying error text (unhandled 500 only)")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="MongoDB connectivity: connected, disconnected")
    media: str = Field(description="Media host credentials: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
