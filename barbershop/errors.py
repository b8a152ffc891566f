# barbershop/errors.py

"""
Typed failures of the booking core.

Raised by the service modules and turned into HTTP responses by the
handlers registered in main.py.
"""


class BookingError(Exception):
    """Base class. `status_code` is the HTTP status the API answers with."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormatError(BookingError):
    """Malformed date or clock-time string."""

    status_code = 400


class ValidationError(BookingError):
    """A business rule rejected the request; retry with different input."""

    status_code = 422


class NotFoundError(BookingError):
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ForbiddenError(BookingError):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class ConflictError(BookingError):
    """Slot taken, duplicate schedule, or stale price."""

    status_code = 409
