"""
Pytest configuration and fixtures
"""
import random
from datetime import datetime, timezone

import httpx
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from earthdash.core.geo_utils import GeoBounds
from earthdash.ingestion.cmr_client import GranuleMetadata


FIRE_CSV_HEADER = (
    "latitude,longitude,brightness,scan,track,acq_date,acq_time,"
    "satellite,confidence,version,bright_t31,frp,daynight"
)


@pytest.fixture
def manhattan_bounds():
    """Small box around lower Manhattan."""
    return GeoBounds(north=40.8, south=40.6, east=-73.9, west=-74.1)


@pytest.fixture
def fire_row():
    """A single MODIS detection inside the Manhattan box."""
    return "40.7,-74.0,300,1,1,2024-01-01,0130,T,80,6.1,290,15.2,D"


@pytest.fixture
def fire_csv(fire_row):
    """Global feed excerpt: one row inside the Manhattan box, two outside, one short."""
    return "\n".join([
        FIRE_CSV_HEADER,
        fire_row,
        "41.0,-74.0,310,1,1,2024-01-01,0130,T,75,6.1,291,12.0,D",
        "-22.5,-45.5,350.5,1.2,1.1,2024-01-01,1430,A,90,6.1,300,50.0,D",
        "40.65,-73.95,305",
        "40.75,-74.05,320,1,1,2024-01-01,0200,A,60,6.1,295,8.5,N",
        "",
    ])


@pytest.fixture
def fixed_now():
    """Deterministic request time."""
    return datetime(2024, 6, 15, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(42)


@pytest.fixture
def granule():
    """Clear-sky MODIS land surface temperature granule."""
    return GranuleMetadata(
        id="G123-LPDAAC",
        title="MOD11A1.A2024167.h12v04.061",
        time_start="2024-06-15T15:30:00.000Z",
        time_end="2024-06-15T15:35:00.000Z",
        cloud_cover=20.0,
        granule_size=3.5,
    )


@pytest.fixture
def mock_transport():
    """Build an httpx.MockTransport from a request handler."""
    def _build(handler):
        return httpx.MockTransport(handler)
    return _build
