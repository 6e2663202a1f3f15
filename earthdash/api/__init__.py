"""
EarthDash - API Module
FastAPI application and response envelope.
"""

from earthdash.api.envelope import Envelope, ErrorInfo

__all__ = ["Envelope", "ErrorInfo"]
