"""
EarthDash - Error Taxonomy
Exceptions raised by clients and handlers, mapped to HTTP envelopes by the API.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Machine-readable error categories carried in response envelopes."""

    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    INTERNAL = "internal"


class DashboardError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DashboardError):
    """Missing or malformed bounds, coordinates, or identifiers."""

    kind = ErrorKind.VALIDATION
    status_code = 400


class MissingCredentials(ValidationError):
    """A required caller-supplied token was not provided."""

    kind = ErrorKind.UNAUTHORIZED
    status_code = 401


class NotFound(DashboardError):
    """The requested resource does not exist upstream."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404


class UpstreamUnavailable(DashboardError):
    """
    A third-party source failed: network error, non-success status,
    or an unparseable payload.

    Attributes:
        source: Name of the upstream service
        status: Upstream HTTP status code, when one was received
    """

    kind = ErrorKind.UPSTREAM_UNAVAILABLE
    status_code = 502

    def __init__(
        self,
        source: str,
        message: str,
        status: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(f"{source}: {message}", details)
        self.source = source
        self.status = status


class InternalError(DashboardError):
    """Unexpected failure inside the service."""

    kind = ErrorKind.INTERNAL
    status_code = 500
