"""
Salon API — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests run without MongoDB and without calling Cloudinary.
How:   An in-memory collection double implements the handful of async
       collection methods the services use; the HTTP client overrides the
       `get_database` dependency with it. Cloudinary's uploader is patched.

Fixture Hierarchy:
    ├── fake_db: In-memory database (fresh per test)
    ├── cloudinary_mock: Patched cloudinary.uploader.upload / destroy
    ├── sample_booking_payload: Valid POST /api/bookings body
    ├── sample_image_bytes / large_image_bytes: Upload content
    └── test_client: HTTPX AsyncClient bound to a fresh app
"""

import copy
import itertools
import os
import tempfile
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["MONGODB_URI"] = "mongodb://localhost:27017/salon_test"
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-key"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret"
os.environ["STATIC_DIR"] = os.path.join(tempfile.gettempdir(), "salon-api-no-static")
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# In-memory MongoDB double
# ══════════════════════════════════════════════════════════════════════════

def _matches(document: dict, query: dict) -> bool:
    # Equality only; a None value also matches a missing key, as in MongoDB
    return all(document.get(key) == value for key, value in query.items())


class InMemoryCursor:
    def __init__(self, documents):
        self._documents = documents

    def sort(self, keys):
        for key, direction in reversed(keys):
            self._documents.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    async def to_list(self, length=None):
        docs = [copy.deepcopy(d) for d in self._documents]
        return docs if length is None else docs[:length]


class InMemoryCollection:
    """Implements the subset of AsyncCollection used by the services."""

    def __init__(self):
        self.documents = []
        self.fail_next = None

    def _raise_if_failing(self):
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    def find(self, query=None):
        self._raise_if_failing()
        return InMemoryCursor([d for d in self.documents if _matches(d, query or {})])

    async def find_one(self, query):
        self._raise_if_failing()
        for document in self.documents:
            if _matches(document, query):
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document):
        self._raise_if_failing()
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one_and_update(self, query, update, return_document=None):
        self._raise_if_failing()
        for document in self.documents:
            if _matches(document, query):
                document.update(copy.deepcopy(update.get("$set", {})))
                for key, amount in update.get("$inc", {}).items():
                    document[key] = document.get(key, 0) + amount
                return copy.deepcopy(document)
        return None

    async def delete_one(self, query):
        self._raise_if_failing()
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def create_index(self, keys, **kwargs):
        return "_".join(f"{k}_{d}" for k, d in keys)


class InMemoryDatabase:
    name = "salon_test"

    def __init__(self):
        self._collections = {}

    def __getitem__(self, name):
        return self._collections.setdefault(name, InMemoryCollection())


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_db():
    return InMemoryDatabase()


@pytest.fixture
def cloudinary_mock():
    """
    Patches the Cloudinary uploader.

    upload() returns a distinct public_id per call under product-images/;
    destroy() reports success. Tests can change return values/side effects.
    """
    counter = itertools.count(1)

    def fake_upload(file, **options):
        n = next(counter)
        public_id = f"{options.get('folder', 'product-images')}/img{n}"
        return {
            "public_id": public_id,
            "secure_url": f"https://res.cloudinary.com/test-cloud/image/upload/v1/{public_id}.png",
        }

    with patch("cloudinary.uploader.upload", side_effect=fake_upload) as upload, \
         patch("cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
        yield SimpleNamespace(upload=upload, destroy=destroy)


@pytest.fixture
def sample_booking_payload():
    return {
        "clientName": "A",
        "clientPhone": "555",
        "serviceId": "s1",
        "serviceName": "Cut",
        "stylistId": "st1",
        "stylistName": "Jo",
        "date": "2024-05-01",
        "time": "10:00",
    }


@pytest.fixture
def sample_image_bytes():
    """PNG signature plus an empty IHDR-sized body; enough for upload tests."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def large_image_bytes():
    """6MB of content, over the 5MB upload limit."""
    return b"\x00" * (6 * 1024 * 1024)


@pytest_asyncio.fixture
async def test_client(fake_db):
    """
    HTTPX AsyncClient talking to a fresh app whose database dependency
    returns the in-memory double. The lifespan (real MongoDB) is not run.
    """
    from salon_api.database import get_database
    from salon_api.main import create_app

    app = create_app()
    app.dependency_overrides[get_database] = lambda: fake_db
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
