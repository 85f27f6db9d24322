"""Domain exceptions shared across the booking, scheduling and payment domains.

Each exception carries the HTTP status it maps to; ``main.py`` installs a
single handler that renders them as ``{"detail": message}``.
"""

from typing import Optional


class BookingError(Exception):
    """Base class for every error raised by the salon domains"""

    status_code = 500

    def __init__(self, message: str = "", *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message or self.__class__.__name__
        if status_code is not None:
            self.status_code = status_code


class ValidationError(BookingError, ValueError):
    """Missing or malformed caller input. Never retried automatically."""

    status_code = 400


class FormatError(ValidationError):
    """A time string or minute count outside the accepted range"""


class NotFoundError(BookingError):
    status_code = 404


class InvalidTransition(BookingError):
    """A booking status change the lifecycle does not allow"""

    status_code = 409


class UpstreamRejected(BookingError):
    """The payment processor explicitly declined the request"""

    status_code = 400


class TransientError(BookingError):
    """Network or timeout failure talking to the processor; safe to retry"""

    status_code = 500


class SignatureInvalid(BookingError):
    status_code = 401


class AlreadyProcessed(BookingError):
    """Not a failure: the payment reference was consumed by an earlier delivery"""

    status_code = 200


class InternalError(BookingError):
    status_code = 500
