"""
Booky - Pydantic Request/Response Schemas
=========================================

What:  Pydantic models defining the API contract for the book endpoints.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate the OpenAPI documentation.
Who:   Used by route handlers as body/return types and by BookService as
       the typed record produced from stored documents.

The stored document shape lives in `booky.services.book_service`; these
models never see `_id` or BSON types.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# num_pages is stored as a BSON int32
MAX_NUM_PAGES = 2**31 - 1


def _require_utf8(v: str) -> str:
    """Rejects strings BSON cannot store, e.g. a lone surrogate from a `\\ud800` escape."""
    try:
        v.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError("must be valid UTF-8 text")
    return v


# ══════════════════════════════════════════════════════════════════════════
# Request Models - What the client sends
# ══════════════════════════════════════════════════════════════════════════


class BookRequest(BaseModel):
    """
    What:  Body of POST /book and PUT /book/{id}.
    How:   All four fields are required; a PUT replaces the whole record.
           `id` and `added_at` are server-controlled and ignored if sent.
    """
    name: str = Field(description="Book title")
    author: str = Field(description="Author name")
    num_pages: int = Field(
        ge=0, le=MAX_NUM_PAGES, strict=True,
        description="Page count (non-negative JSON integer; strings and floats are rejected)",
    )
    tags: List[str] = Field(description="Ordered list of tags")

    @field_validator("name", "author")
    @classmethod
    def validate_utf8(cls, v: str) -> str:
        return _require_utf8(v)

    @field_validator("tags")
    @classmethod
    def validate_tags_utf8(cls, v: List[str]) -> List[str]:
        return [_require_utf8(tag) for tag in v]


# ══════════════════════════════════════════════════════════════════════════
# Response Models - What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class Book(BaseModel):
    """
    What:  Full representation of a stored book.
    Who:   Returned by GET /book (as a list), POST /book and PUT /book/{id}.
    """
    id: str = Field(description="Store-assigned identifier (24 hex characters)")
    name: str = Field(description="Book title")
    author: str = Field(description="Author name")
    num_pages: int = Field(ge=0, description="Page count")
    added_at: datetime = Field(description="When the book was created or last replaced (UTC)")
    tags: List[str] = Field(description="Ordered list of tags")


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "invalid_id",
            "message": "Invalid book ID: 'abc'",
            "details": {"book_id": "abc"},
            "request_id": "1f0c2a9e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
