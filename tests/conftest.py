"""
Booky - Test Configuration (conftest.py)
========================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── fake_collection:  in-memory stand-in for the books collection
    ├── book_request:     a valid BookRequest
    ├── sample_document:  a well-formed stored document
    └── test_client:      HTTPX AsyncClient wired to the app with fake_collection
"""

import os
from copy import deepcopy
from datetime import datetime, timezone

# Set before any booky import so Settings never sees a developer's .env values
os.environ["MONGODB_URL"] = "mongodb://127.0.0.1:1"
os.environ["MONGODB_TIMEOUT_MS"] = "100"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from booky.database import get_collection
from booky.schemas.book import BookRequest


class _Result:
    def __init__(self, **fields):
        self.__dict__.update(fields)


class FakeCollection:
    """
    Minimal async collection keeping documents in a dict keyed by `_id`.

    Implements only the calls BookService makes: find, insert_one,
    replace_one, delete_one.
    """

    def __init__(self):
        self.documents = {}

    def find(self, query=None):
        docs = [deepcopy(doc) for doc in self.documents.values()]

        async def cursor():
            for doc in docs:
                yield doc

        return cursor()

    async def insert_one(self, document):
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = deepcopy(document)
        return _Result(inserted_id=document["_id"], acknowledged=True)

    async def replace_one(self, query, replacement):
        oid = query["_id"]
        if oid not in self.documents:
            return _Result(matched_count=0, modified_count=0)
        stored = deepcopy(replacement)
        stored["_id"] = oid
        self.documents[oid] = stored
        return _Result(matched_count=1, modified_count=1)

    async def delete_one(self, query):
        removed = self.documents.pop(query["_id"], None)
        return _Result(deleted_count=0 if removed is None else 1)


@pytest.fixture
def fake_collection():
    return FakeCollection()


@pytest.fixture
def book_request():
    return BookRequest(
        name="The Pragmatic Programmer",
        author="Andrew Hunt",
        num_pages=352,
        tags=["programming", "craft"],
    )


@pytest.fixture
def sample_document():
    """A stored document exactly as the driver would return it."""
    return {
        "_id": ObjectId("65a1f0c2b3d4e5f601234567"),
        "name": "Dune",
        "author": "Frank Herbert",
        "num_pages": 412,
        "added_at": datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc),
        "tags": ["sci-fi", "classic"],
    }


@pytest_asyncio.fixture
async def test_client(fake_collection):
    """
    Provides an async HTTP test client for endpoint testing.

    The collection dependency is overridden, so no MongoDB server is needed.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/book")
            assert response.status_code == 200
    """
    from booky.main import app

    app.dependency_overrides[get_collection] = lambda: fake_collection
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
