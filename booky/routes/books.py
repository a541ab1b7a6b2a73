"""
Booky - Book Route Handlers
===========================

What:  Handles the four book operations:
           GET    /book            list every book
           POST   /book            create a book          (201)
           PUT    /book/{book_id}  replace a book         (200)
           DELETE /book/{book_id}  delete a book          (200)
How:   Extracts the path ID and validated JSON body, delegates to
       BookService, returns JSON. Errors are raised as booky exceptions and
       formatted by the global handlers in main.py.
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from pymongo.asynchronous.collection import AsyncCollection

from booky.database import get_collection
from booky.schemas.book import Book, BookRequest, ErrorResponse
from booky.services.book_service import book_service


# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/book", tags=["Books"])


@router.get(
    "",
    response_model=List[Book],
    responses={
        200: {"description": "Every stored book"},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List all books",
)
async def list_books(
    collection: AsyncCollection = Depends(get_collection),
) -> List[Book]:
    return await book_service.list_books(collection)


@router.post(
    "",
    status_code=201,
    response_model=Book,
    responses={
        201: {"description": "Book created", "model": Book},
        400: {"description": "Invalid request body", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a book",
    description=(
        "Stores a new book. The server assigns `id` and sets `added_at`; "
        "the created record is returned."
    ),
)
async def create_book(
    body: BookRequest,
    collection: AsyncCollection = Depends(get_collection),
) -> Book:
    return await book_service.create_book(collection, body)


@router.put(
    "/{book_id}",
    response_model=Book,
    responses={
        200: {"description": "Book replaced", "model": Book},
        400: {"description": "Invalid ID or request body", "model": ErrorResponse},
        404: {"description": "Book not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Replace a book",
    description=(
        "Replaces every field of an existing book (no partial update). "
        "`added_at` is reset to the time of the update."
    ),
)
async def update_book(
    book_id: str,
    body: BookRequest,
    collection: AsyncCollection = Depends(get_collection),
) -> Book:
    """
    Args:
        book_id: 24-character hex ObjectId. Anything else is rejected with
                 400 by BookService before the database is touched.
    """
    return await book_service.update_book(collection, book_id, body)


@router.delete(
    "/{book_id}",
    status_code=200,
    responses={
        200: {"description": "Book deleted"},
        400: {"description": "Invalid ID", "model": ErrorResponse},
        404: {"description": "Book not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a book",
)
async def delete_book(
    book_id: str,
    collection: AsyncCollection = Depends(get_collection),
) -> Response:
    await book_service.delete_book(collection, book_id)
    return Response(status_code=200)
