"""
EarthDash - Core Utilities
Central configuration, logging, errors, and geospatial helpers.
"""

from earthdash.core.config import settings, get_settings
from earthdash.core.errors import (
    ErrorKind,
    DashboardError,
    ValidationError,
    MissingCredentials,
    NotFound,
    UpstreamUnavailable,
    InternalError,
)
from earthdash.core.geo_utils import (
    GeoBounds,
    Point,
    haversine_distance,
    degree_distance,
    parse_coords,
    parse_bbox,
)

__all__ = [
    "settings",
    "get_settings",
    "ErrorKind",
    "DashboardError",
    "ValidationError",
    "MissingCredentials",
    "NotFound",
    "UpstreamUnavailable",
    "InternalError",
    "GeoBounds",
    "Point",
    "haversine_distance",
    "degree_distance",
    "parse_coords",
    "parse_bbox",
]
