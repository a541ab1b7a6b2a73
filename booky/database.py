"""
Booky - Database Handle Management
==================================

What:  Shared async MongoDB client, the books collection accessor, and the
       FastAPI dependency that hands the collection to route handlers.
How:   One `AsyncMongoClient` (pymongo's native asyncio API) is created on
       first use and reused by every request. The driver owns its own
       connection pool; the application never touches connections directly.
Who:   Used by route handlers via FastAPI's dependency injection system,
       by the health check, and by the lifespan handler at shutdown.

Lifecycle:
    First request  → get_client() builds the client (lazy, inside the event loop)
    Every request  → get_collection() returns the same collection handle
    Shutdown       → close_client() closes the pool and forgets the client
"""

import logging
from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection

from booky.config import settings

logger = logging.getLogger(__name__)

_client: Optional[AsyncMongoClient] = None


def get_client() -> AsyncMongoClient:
    """
    Return the process-wide MongoDB client, creating it on first call.

    The client is built lazily so importing the app (tests, tooling) never
    opens sockets. `tz_aware=True` makes the driver hand back UTC-aware
    datetimes for `added_at`.
    """
    global _client
    if _client is None:
        _client = AsyncMongoClient(
            settings.mongodb_url,
            appname=settings.mongodb_app_name,
            tz_aware=True,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        )
        logger.info(
            "MongoDB client created for database '%s'", settings.mongodb_database
        )
    return _client


async def get_collection() -> AsyncCollection:
    """
    FastAPI dependency that provides the books collection.

    Example usage in a route:
        @router.get("/book")
        async def list_books(collection: AsyncCollection = Depends(get_collection)):
            return await book_service.list_books(collection)
    """
    client = get_client()
    return client[settings.mongodb_database][settings.mongodb_collection]


async def ping() -> None:
    """Round-trips a `ping` command; raises the driver error if the server is unreachable."""
    await get_client().admin.command("ping")


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def close_client() -> None:
    """
    What:  Closes the shared client and its connection pool.
    When:  Called during application shutdown (lifespan handler).
    """
    global _client
    if _client is not None:
        await _client.close()
        _client = None
        logger.info("MongoDB client closed")
