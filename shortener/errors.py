"""Error taxonomy for the URL shortener.

Every failure surfaced to an HTTP caller is a ShortenerError subclass that
carries its own status code and plain-text message. The application installs
a single handler that renders them (see shortener.main).
"""

from typing import Optional

__all__ = [
    "ShortenerError",
    "InvalidURLError",
    "MethodNotAllowedError",
    "ShortCodeNotFoundError",
    "StorageUnavailableError",
    "ShortCodeSpaceExhaustedError",
]


class ShortenerError(Exception):
    """Base error for the shortener service.

    Attributes:
        status_code: HTTP status code (default: 500)
        message: Plain-text message returned to the client
    """

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class InvalidURLError(ShortenerError):
    """Unparsable, empty or rejected request body."""

    status_code = 400
    message = "Invalid request body"


class MethodNotAllowedError(ShortenerError):
    status_code = 405
    message = "Only POST method is allowed"


class ShortCodeNotFoundError(ShortenerError):
    """Short code was never registered."""

    status_code = 404
    message = "URL not found"


class StorageUnavailableError(ShortenerError):
    """Backing storage failed. The in-memory registry never raises this."""

    status_code = 500
    message = "Storage unavailable"


class ShortCodeSpaceExhaustedError(ShortenerError):
    """Every generated candidate collided with an existing short code."""

    status_code = 503
    message = "Could not allocate a short code, try again"
