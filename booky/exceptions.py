"""
Booky - Custom Exception Hierarchy
==================================

What:  Application-specific exceptions for the failure cases of the book API.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) catch these
       and return structured JSON error responses with the right status code.
Who:   Raised by the data-access layer; caught by the global handlers.

Exception Hierarchy:
    BookyError (base)
    ├── ValidationError          → 400 Bad Request
    ├── InvalidIdError           → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    └── MalformedDocumentError   → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BookyError(Exception):
    """
    Base exception for all Booky application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BookyError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Request body failed validation",
            "details": {"errors": [{"field": "num_pages", "message": "..."}]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidIdError(BookyError):
    """
    Raised when a path identifier is not a valid ObjectId.

    When:    PUT/DELETE /book/{id} with anything other than 24 hex characters.
    HTTP:    400 Bad Request

    The offending value is echoed back in the message so the client can see
    what was rejected.
    """

    def __init__(
        self,
        book_id: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["book_id"] = book_id
        super().__init__(message=f"Invalid book ID: '{book_id}'", context=ctx)
        self.book_id = book_id


class NotFoundError(BookyError):
    """
    Raised when a requested resource does not exist.

    When:    PUT/DELETE /book/{id} with a well-formed ID that matches no document.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(BookyError):
    """
    Raised when a MongoDB operation fails.

    When:    Server unreachable, command rejected, network error mid-cursor.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Driver error
        details are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MalformedDocumentError(BookyError):
    """
    Raised when a stored document cannot be read back as a Book.

    When:    A field is missing or holds a value of the wrong BSON type.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        field: str,
        reason: str = "missing",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["field"] = field
        ctx["reason"] = reason
        super().__init__(
            message=f"Stored book document has a {reason} '{field}' field",
            context=ctx,
        )
        self.field = field
        self.reason = reason
