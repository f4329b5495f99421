"""
Domain errors raised by the slot, appointment and booking services.

Each error carries the HTTP status the request layer answers with, so the
services stay free of FastAPI imports.
"""
from fastapi import status


class BookingError(Exception):
    """Base class for expected booking outcomes."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"
    default_detail = "An unexpected error occurred"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"
    default_detail = "The requested resource was not found"


class ConflictError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"
    default_detail = "The resource is in a conflicting state"


class ForbiddenError(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    default_detail = "Not enough permissions"


class InvalidInputError(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Bad Request"
    default_detail = "Invalid input"


class InternalError(BookingError):
    pass
