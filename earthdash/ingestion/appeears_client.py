"""
EarthDash - AppEEARS Product Catalogue
Lists the analysis-ready products NASA AppEEARS (Application for Extracting
and Exploring Analysis Ready Samples) can extract for an area.

API Documentation: https://appeears.earthdatacloud.nasa.gov/api/
"""

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import httpx

from earthdash.core.config import settings
from earthdash.core.constants import APPEEARS_DEFAULT_PRODUCT_COUNT, APPEEARS_FALLBACK_PRODUCTS
from earthdash.core.errors import ValidationError
from earthdash.ingestion.http import UpstreamClient

logger = logging.getLogger(__name__)


@dataclass
class AppEEARSProduct:
    """One product entry from the AppEEARS catalogue."""
    product: str
    platform: str
    description: str
    raster_type: str
    resolution: str
    temporal_granularity: str
    version: str
    available: bool
    doc_link: str
    source: str
    temporal_extent_start: str
    temporal_extent_end: str
    deleted: bool
    doi: str
    product_and_version: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "AppEEARSProduct":
        return cls(
            product=record.get("Product", ""),
            platform=record.get("Platform", ""),
            description=record.get("Description", ""),
            raster_type=record.get("RasterType", ""),
            resolution=record.get("Resolution", ""),
            temporal_granularity=record.get("TemporalGranularity", ""),
            version=record.get("Version", ""),
            available=bool(record.get("Available", False)),
            doc_link=record.get("DocLink", ""),
            source=record.get("Source", ""),
            temporal_extent_start=record.get("TemporalExtentStart", ""),
            temporal_extent_end=record.get("TemporalExtentEnd", ""),
            deleted=bool(record.get("Deleted", False)),
            doi=record.get("DOI", ""),
            product_and_version=record.get("ProductAndVersion", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def fallback_products() -> List[AppEEARSProduct]:
    """MODIS temperature and vegetation products served when the catalogue is down."""
    return [AppEEARSProduct.from_record(record) for record in APPEEARS_FALLBACK_PRODUCTS]


def select_products(
    available: List[AppEEARSProduct],
    requested: Optional[List[str]] = None,
) -> List[AppEEARSProduct]:
    """Products named in `requested`, or the first few of the catalogue when none are named."""
    if requested:
        wanted = set(requested)
        return [p for p in available if p.product in wanted]
    return available[:APPEEARS_DEFAULT_PRODUCT_COUNT]


def parse_date_range(value: str) -> Tuple[date, date]:
    """
    Parse a "YYYY-MM-DD,YYYY-MM-DD" range.

    Raises:
        ValidationError: if either date is malformed or start is after end
    """
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 2:
        raise ValidationError(f"Invalid temporal range '{value}'. Expected: YYYY-MM-DD,YYYY-MM-DD")
    try:
        start, end = date.fromisoformat(parts[0]), date.fromisoformat(parts[1])
    except ValueError:
        raise ValidationError(f"Invalid temporal range '{value}'. Expected: YYYY-MM-DD,YYYY-MM-DD")
    if start > end:
        raise ValidationError(f"Temporal range starts after it ends: '{value}'")
    return start, end


class AppEEARSClient(UpstreamClient):
    """
    Client for the public AppEEARS product listing (no login required).

    Usage:
        with AppEEARSClient() as client:
            products = client.list_products()
    """

    SOURCE = "NASA AppEEARS"

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport, headers={"Accept": "application/json"})
        self.base_url = settings.appeears_api_url.rstrip("/")

    def list_products(self, limit: int = 50) -> List[AppEEARSProduct]:
        """
        Fetch the product catalogue.

        Raises:
            UpstreamUnavailable: on network failure, bad status, or a body
                that is not a list of products
        """
        records = self._get_json(f"{self.base_url}/product", expect=list, params={"limit": limit})
        products = [AppEEARSProduct.from_record(r) for r in records if isinstance(r, dict)]
        logger.info(f"AppEEARS listed {len(products)} products")
        return products
