"""
Salon API — Database Client Management
=======================================

What:  Owns the MongoDB client, exposes the database handle, and provides the
       FastAPI dependency that hands it to route handlers.
Why:   One explicit object with a documented open/close lifecycle instead of
       module-level connection state.
How:   `MongoDatabase.connect()` is awaited in the application lifespan; it
       creates an `AsyncMongoClient`, pings the server (startup fails if the
       ping fails) and ensures the indexes used by the list queries.
       The instance is stored on `app.state.mongo`; `get_database` reads it
       per request. `close()` runs on shutdown.

Connection Pooling:
    The driver keeps its own connection pool per client, and the client is
    safe for concurrent use by all requests on the event loop, so a single
    client per process is all that is needed.
"""

import logging
from typing import Optional

from fastapi import Request
from pymongo import AsyncMongoClient, DESCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from salon_api.exceptions import DatabaseError

logger = logging.getLogger(__name__)

BOOKINGS = "bookings"
PRODUCTS = "products"


class MongoDatabase:
    """
    Lifecycle wrapper around a single `AsyncMongoClient`.

    Usage:
        mongo = MongoDatabase(settings.mongodb_uri, settings.mongodb_db_name)
        await mongo.connect()     # at startup
        db = mongo.db             # per request (via get_database)
        await mongo.close()       # at shutdown
    """

    def __init__(self, uri: str, default_db_name: str, timeout_ms: int = 5000):
        self.uri = uri
        self.default_db_name = default_db_name
        self.timeout_ms = timeout_ms
        self._client: Optional[AsyncMongoClient] = None
        self._db: Optional[AsyncDatabase] = None

    @property
    def db(self) -> AsyncDatabase:
        if self._db is None:
            raise DatabaseError(message="Database connection is not open.")
        return self._db

    async def connect(self) -> AsyncDatabase:
        """
        Opens the client, verifies the server answers, and ensures indexes.

        Raises:
            DatabaseError if the server cannot be reached.
        """
        # tz_aware: stored UTC timestamps come back as aware datetimes
        self._client = AsyncMongoClient(
            self.uri,
            tz_aware=True,
            serverSelectionTimeoutMS=self.timeout_ms,
        )
        self._db = self._client.get_default_database(default=self.default_db_name)

        try:
            await self._client.admin.command("ping")
            await self.ensure_indexes()
        except PyMongoError as e:
            logger.error("MongoDB connection failed: %s", str(e))
            await self.close()
            raise DatabaseError(
                message="Could not connect to MongoDB.",
                context={"error": str(e)},
            ) from e

        logger.info("MongoDB connected (database=%s)", self._db.name)
        return self._db

    async def ensure_indexes(self) -> None:
        """Indexes backing the newest-first list queries."""
        await self.db[BOOKINGS].create_index([("createdAt", DESCENDING)])
        await self.db[PRODUCTS].create_index([("createdAt", DESCENDING)])
        await self.db[PRODUCTS].create_index(
            [("category", 1), ("createdAt", DESCENDING)]
        )

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s", str(e))
            return False

    async def close(self) -> None:
        """Closes the client and every pooled connection."""
        if self._client is not None:
            await self._client.close()
            logger.info("MongoDB connection closed")
        self._client = None
        self._db = None


async def get_database(request: Request) -> AsyncDatabase:
    """
    FastAPI dependency that provides the database handle opened at startup.

    Example usage in a route:
        @router.get("/bookings")
        async def list_bookings(db: AsyncDatabase = Depends(get_database)):
            ...
    """
    mongo: Optional[MongoDatabase] = getattr(request.app.state, "mongo", None)
    if mongo is None:
        raise DatabaseError(message="Database connection is not open.")
    return mongo.db
