from typing import Optional


class ApiError(Exception):
    """Base class for failures talking to the attendance backend."""


class NetworkError(ApiError):
    """The request raised, or the server answered with a non-2xx status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UnexpectedContentType(ApiError):
    """JSON was expected but something else came back (usually a misrouted request)."""

    def __init__(self, url: str, content_type: str, body: str):
        super().__init__(
            f"Expected JSON from {url}, got: {content_type or 'unknown'}\n{body[:200]}"
        )
        self.url = url
        self.content_type = content_type


class ValidationError(Exception):
    """A form value was rejected before any request was sent."""
