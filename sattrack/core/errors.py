"""Error taxonomy shared by the upstream client, the services and the routes."""
from typing import Optional


class SatTrackError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(SatTrackError):
    """Raised at startup when required configuration is missing."""


class ValidationError(SatTrackError):
    """Client input was rejected before any upstream call."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class UpstreamError(SatTrackError):
    """Base class for failures talking to the N2YO API.

    ``operation`` is filled in by the domain service so the caller knows which
    logical request failed; the subclass stays the same.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, endpoint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
        self.operation: Optional[str] = None

    def __str__(self) -> str:
        if self.operation:
            return f"Failed to fetch {self.operation}: {self.message}"
        return self.message


class UpstreamHttpError(UpstreamError):
    """Non-2xx response, an error reported in the body, or a transport failure."""


class UpstreamRateLimited(UpstreamError):
    """The API key has exhausted its transaction budget."""


class UpstreamMalformed(UpstreamError):
    """The body is not JSON or lacks a field required by the operation."""
