"""
Salon API — Application Package Initializer
============================================

What:  Marks the `salon_api` directory as a Python package.
Why:   Enables module imports like `from salon_api.config import settings`.
Who:   Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Bookings, products, media host
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Stored documents + API contracts
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async MongoDB client handle
    └─────────────────────────────────────┘

    Routes never touch the database directly; services receive the database
    handle as an argument so they can be tested against an in-memory double.
"""

__version__ = "1.0.0"
