"""
EarthDash - Response Envelope

Every JSON endpoint answers with the same shape:

    {success, data, error, fallback, source, timestamp}

`fallback` is true whenever `data` is not authoritative upstream data
(static sample or synthetic model); `error` then explains why.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from earthdash.core.errors import DashboardError, ErrorKind


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ErrorInfo(BaseModel):
    """Error description carried in an envelope."""
    kind: ErrorKind
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: DashboardError) -> "ErrorInfo":
        return cls(kind=exc.kind, message=exc.message, details=exc.details)


class Envelope(BaseModel):
    """Canonical response wrapper."""
    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorInfo] = None
    fallback: bool = False
    source: Optional[str] = None
    timestamp: str = Field(default_factory=_now_iso)


def ok(data: Any, source: Optional[str] = None) -> Envelope:
    return Envelope(success=True, data=data, source=source)


def degraded(
    data: Any,
    reason: Optional[DashboardError] = None,
    source: Optional[str] = None,
) -> Envelope:
    """Successful response built from fallback data, with the failure that caused it."""
    return Envelope(
        success=True,
        data=data,
        error=ErrorInfo.from_exception(reason) if reason is not None else None,
        fallback=True,
        source=source,
    )


def failure(exc: DashboardError) -> Envelope:
    return Envelope(success=False, error=ErrorInfo.from_exception(exc))
