"""
Salon API — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for the different failure scenarios.
Why:   Each exception maps to one HTTP status in the global handlers
       (registered in main.py), so services never deal with HTTP details.
How:   Each exception carries a user-facing message and an optional context
       dict that is logged but never returned verbatim for server errors.

Exception Hierarchy:
    SalonError (base)           → 500 Internal Server Error
    ├── ValidationError         → 400 Bad Request (client can fix)
    ├── NotFoundError           → 404 Not Found
    │   └── InvalidIdError      → 404 Not Found (malformed identifier)
    ├── ConflictError           → 409 Conflict (concurrent product edit)
    ├── MediaStorageError       → 500 Internal Server Error (media host failed)
    └── DatabaseError           → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class SalonError(Exception):
    """
    Base exception for all Salon API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only exposed for 4xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SalonError):
    """
    Raised when client input fails validation.

    When:    Required field missing, image type not allowed, image too large.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(SalonError):
    """
    Raised when a requested resource does not exist.

    MongoDB returns None for missing documents; services convert that into
    this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class InvalidIdError(NotFoundError):
    """
    Raised when a path identifier is not a valid ObjectId.

    A malformed id can never resolve to a document, so it is answered with
    404 like any other unknown id, but with a message naming the format problem.
    """

    def __init__(self, resource: str, resource_id: str):
        super().__init__(resource=resource, resource_id=resource_id)
        self.message = f"'{resource_id}' is not a valid {resource} ID"
        self.args = (self.message,)


class ConflictError(SalonError):
    """
    Raised when a product was modified by another request between the read
    and the write of an update.

    HTTP:    409 Conflict. The client should reload the product and retry.
    """

    def __init__(
        self,
        message: str = "The resource was modified by another request. Reload it and try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MediaStorageError(SalonError):
    """
    Raised when the media host (Cloudinary) rejects or fails an upload.

    HTTP:    500 Internal Server Error. Deletions never raise this; they are
             best-effort and only logged.
    """

    def __init__(
        self,
        message: str = "The image storage provider request failed. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SalonError):
    """
    Raised when a MongoDB operation fails unexpectedly.

    The message returned to the client is always generic; the driver error is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
