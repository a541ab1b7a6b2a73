"""
Booky - Book Service (Data Access Layer)
========================================

What:  Translates typed book requests into MongoDB calls and stored
       documents back into typed `Book` records.
How:   Each operation is exactly one collection call (find, insert_one,
       replace_one, delete_one). Driver failures are wrapped in
       DatabaseError; ID and document problems get their own exceptions.
Who:   Called by route handlers; receives the collection per call.

Stored document shape:
    {
        "_id":       ObjectId,        assigned by the store on insert
        "name":      str,
        "author":    str,
        "num_pages": int32,
        "added_at":  datetime (UTC),  set by the server on insert and replace
        "tags":      [str, ...]
    }

BookService holds no state of its own; the collection handle is passed in
so tests can substitute a fake.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from booky.exceptions import (
    DatabaseError,
    InvalidIdError,
    MalformedDocumentError,
    NotFoundError,
)
from booky.schemas.book import Book, BookRequest

logger = logging.getLogger(__name__)

# ── Document Field Names ──────────────────────────────────────────────────
ID = "_id"
NAME = "name"
AUTHOR = "author"
NUM_PAGES = "num_pages"
ADDED_AT = "added_at"
TAGS = "tags"


# ══════════════════════════════════════════════════════════════════════════
# Marshalling Helpers
# ══════════════════════════════════════════════════════════════════════════


def parse_object_id(book_id: str) -> ObjectId:
    """
    Convert a path identifier into an ObjectId.

    Raises:
        InvalidIdError: `book_id` is not 24 hexadecimal characters.
    """
    try:
        return ObjectId(book_id)
    except (InvalidId, TypeError):
        raise InvalidIdError(book_id)


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds, the precision BSON dates keep."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def build_document(request: BookRequest, added_at: datetime) -> dict:
    """Build the stored document for `request` (without `_id`)."""
    return {
        NAME: request.name,
        AUTHOR: request.author,
        NUM_PAGES: request.num_pages,
        ADDED_AT: added_at,
        TAGS: list(request.tags),
    }


def _require(doc: Mapping[str, Any], field: str, expected: type) -> Any:
    if field not in doc:
        raise MalformedDocumentError(field, "missing", context={"document_id": str(doc.get(ID))})
    value = doc[field]
    # bool is an int subclass but never a valid page count
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise MalformedDocumentError(
            field,
            "mistyped",
            context={"document_id": str(doc.get(ID)), "type": type(value).__name__},
        )
    return value


def document_to_book(doc: Mapping[str, Any]) -> Book:
    """
    Convert a stored document into a `Book`.

    Every field must be present with the right type. Non-string entries
    inside `tags` are dropped rather than rejected. A naive `added_at`
    (client not configured tz-aware) is taken to be UTC.

    Raises:
        MalformedDocumentError: a field is missing, mistyped, or out of range.
    """
    oid = _require(doc, ID, ObjectId)
    name = _require(doc, NAME, str)
    author = _require(doc, AUTHOR, str)
    num_pages = _require(doc, NUM_PAGES, int)
    added_at = _require(doc, ADDED_AT, datetime)
    tags = _require(doc, TAGS, list)

    if num_pages < 0:
        raise MalformedDocumentError(NUM_PAGES, "negative", context={"document_id": str(oid)})
    if added_at.tzinfo is None:
        added_at = added_at.replace(tzinfo=timezone.utc)

    return Book(
        id=str(oid),
        name=name,
        author=author,
        num_pages=int(num_pages),
        added_at=added_at,
        tags=[tag for tag in tags if isinstance(tag, str)],
    )


# ══════════════════════════════════════════════════════════════════════════
# Service
# ══════════════════════════════════════════════════════════════════════════


class BookService:
    """
    CRUD operations over the books collection.

    Responsibilities:
        - list_books():  every stored book, in natural order
        - create_book(): insert with a server-set added_at
        - update_book(): wholesale replace by ID, refreshing added_at
        - delete_book(): hard delete by ID

    Error Handling Strategy:
        Our own exceptions propagate untouched. PyMongoError is logged with
        its details and re-raised as DatabaseError so the client only ever
        sees a generic message.
    """

    async def list_books(self, collection: AsyncCollection) -> List[Book]:
        """
        Return every stored book.

        Raises:
            DatabaseError: the query or cursor iteration failed
            MalformedDocumentError: a stored document cannot be read
        """
        try:
            books = []
            async for doc in collection.find({}):
                books.append(document_to_book(doc))
            return books
        except PyMongoError as e:
            logger.error("Database error listing books: %s", str(e))
            raise DatabaseError(
                message="Could not retrieve books. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def create_book(self, collection: AsyncCollection, request: BookRequest) -> Book:
        """
        Insert a new book and return it with its store-assigned ID.

        Raises:
            DatabaseError: the insert failed
        """
        doc = build_document(request, utc_now())
        try:
            result = await collection.insert_one(doc)
        except PyMongoError as e:
            logger.error("Database error creating book: %s", str(e))
            raise DatabaseError(
                message="Could not create the book. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        doc[ID] = result.inserted_id
        logger.info("Book created: %s", result.inserted_id)
        return document_to_book(doc)

    async def update_book(
        self, collection: AsyncCollection, book_id: str, request: BookRequest
    ) -> Book:
        """
        Replace every field of an existing book.

        Raises:
            InvalidIdError: `book_id` is not a valid ObjectId
            NotFoundError: no book has this ID
            DatabaseError: the replace failed
        """
        oid = parse_object_id(book_id)
        doc = build_document(request, utc_now())
        try:
            result = await collection.replace_one({ID: oid}, doc)
        except PyMongoError as e:
            logger.error("Database error updating book %s: %s", book_id, str(e))
            raise DatabaseError(
                message="Could not update the book. Please try again.",
                context={"book_id": book_id, "error_type": type(e).__name__},
            ) from e

        if result.matched_count == 0:
            raise NotFoundError(resource="book", resource_id=book_id)

        logger.info("Book updated: %s", book_id)
        doc[ID] = oid
        return document_to_book(doc)

    async def delete_book(self, collection: AsyncCollection, book_id: str) -> None:
        """
        Delete a book by ID.

        Raises:
            InvalidIdError: `book_id` is not a valid ObjectId
            NotFoundError: no book has this ID
            DatabaseError: the delete failed
        """
        oid = parse_object_id(book_id)
        try:
            result = await collection.delete_one({ID: oid})
        except PyMongoError as e:
            logger.error("Database error deleting book %s: %s", book_id, str(e))
            raise DatabaseError(
                message="Could not delete the book. Please try again.",
                context={"book_id": book_id, "error_type": type(e).__name__},
            ) from e

        if result.deleted_count == 0:
            raise NotFoundError(resource="book", resource_id=book_id)

        logger.info("Book deleted: %s", book_id)


book_service = BookService()
