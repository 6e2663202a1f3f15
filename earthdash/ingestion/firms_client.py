"""
NASA FIRMS Client for EarthDash

Fetches the global MODIS active fire CSV feeds published by NASA's Fire
Information for Resource Management System and keeps only the detections
that fall inside a caller-supplied bounding box.

Feed listing: https://firms.modaps.eosdis.nasa.gov/active_fire/
"""

import logging
import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

import httpx

from earthdash.core.config import settings
from earthdash.core.constants import FIRMS_GLOBAL_FEEDS, FIRMS_MIN_COLUMNS
from earthdash.core.geo_utils import GeoBounds
from earthdash.ingestion.http import UpstreamClient

logger = logging.getLogger(__name__)


@dataclass
class FireDetection:
    """
    A single thermal anomaly from the MODIS global feed.

    Attributes:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        brightness: Brightness temperature channel 21/22 in Kelvin
        scan: Scan pixel size in km
        track: Track pixel size in km
        acq_date: Acquisition date (YYYY-MM-DD)
        acq_time: Acquisition time (HHMM UTC)
        satellite: "T" for Terra, "A" for Aqua
        confidence: Detection confidence (0-100, as published)
        version: Collection and processing version
        bright_t31: Brightness temperature channel 31 in Kelvin
        frp: Fire Radiative Power in MW
        daynight: Day/Night flag ("D" or "N")
    """

    latitude: float
    longitude: float
    brightness: float = 0.0
    scan: float = 0.0
    track: float = 0.0
    acq_date: str = ""
    acq_time: str = ""
    satellite: str = ""
    confidence: str = ""
    version: str = ""
    bright_t31: float = 0.0
    frp: float = 0.0
    daynight: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class LookbackWindow:
    """Inclusive calendar-date window ending on `end`."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def compute_lookback_window(
    end: Union[datetime, date],
    days: int = 1,
) -> LookbackWindow:
    """
    Build the date window for a fire query.

    Args:
        end: The caller's "now"; truncated to its calendar date
        days: Number of days to look back (no upper bound)

    Returns:
        LookbackWindow with start = end - days
    """
    end_date = end.date() if isinstance(end, datetime) else end
    return LookbackWindow(start=end_date - timedelta(days=days), end=end_date)


def feed_for_window(window: LookbackWindow) -> str:
    """Pick the smallest global feed covering the window."""
    for feed_days in sorted(FIRMS_GLOBAL_FEEDS):
        if window.days <= feed_days:
            return FIRMS_GLOBAL_FEEDS[feed_days]
    # Longer windows than the feeds publish get the longest one available
    return FIRMS_GLOBAL_FEEDS[max(FIRMS_GLOBAL_FEEDS)]


def _coordinate(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return math.nan


def _number(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _column(columns: List[str], index: int) -> str:
    return columns[index] if index < len(columns) else ""


def filter_fire_detections(csv_text: str, bounds: GeoBounds) -> List[FireDetection]:
    """
    Parse a global fire CSV and keep the rows inside `bounds`.

    The first line is treated as a header and skipped without inspection.
    Rows with fewer than 12 columns and rows whose coordinates do not parse
    are dropped. Never raises on malformed input.

    Args:
        csv_text: Raw CSV body
        bounds: Inclusive bounding box; west > east matches nothing

    Returns:
        Matching detections in feed order
    """
    detections = []

    for line in csv_text.split("\n")[1:]:
        if not line.strip():
            continue

        columns = line.rstrip("\r").split(",")
        if len(columns) < FIRMS_MIN_COLUMNS:
            continue

        latitude = _coordinate(columns[0])
        longitude = _coordinate(columns[1])
        if not bounds.contains(latitude, longitude):
            continue

        detections.append(FireDetection(
            latitude=latitude,
            longitude=longitude,
            brightness=_number(columns[2]),
            scan=_number(columns[3]),
            track=_number(columns[4]),
            acq_date=columns[5],
            acq_time=columns[6],
            satellite=columns[7],
            confidence=columns[8],
            version=columns[9],
            bright_t31=_number(columns[10]),
            frp=_number(columns[11]),
            daynight=_column(columns, 12),
        ))

    return detections


class FIRMSClient(UpstreamClient):
    """
    Client for the NASA FIRMS global active fire CSV feeds.

    Usage:
        with FIRMSClient() as client:
            detections = client.get_detections(bounds, window)

    The global feeds need no MAP_KEY and only cover a rolling 24h/48h/7d
    history, so long windows return whatever the 7 day feed holds.
    """

    SOURCE = "NASA FIRMS"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.base_url = (base_url or settings.firms_feed_base_url).rstrip("/")

    def fetch_global_csv(self, window: LookbackWindow) -> str:
        """
        Download the raw global CSV covering `window`.

        Raises:
            UpstreamUnavailable: on network failure or non-success status
        """
        url = f"{self.base_url}/{feed_for_window(window)}"
        logger.info(f"Fetching global fire feed {url}")
        return self._request("GET", url).text

    def get_detections(
        self,
        bounds: GeoBounds,
        window: LookbackWindow,
    ) -> List[FireDetection]:
        """
        Get detections inside a bounding box.

        Args:
            bounds: Region of interest
            window: Lookback window used to pick the feed

        Returns:
            List of FireDetection objects
        """
        detections = filter_fire_detections(self.fetch_global_csv(window), bounds)
        logger.info(f"Retrieved {len(detections)} detections inside {bounds.to_dict()}")
        return detections
