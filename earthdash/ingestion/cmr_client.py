"""
EarthDash - NASA CMR Granule Search
Looks up MODIS granule metadata around a point through the Common Metadata
Repository search API.

API Documentation: https://cmr.earthdata.nasa.gov/search/site/docs/search/api.html
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from earthdash.core.config import settings
from earthdash.core.constants import (
    CMR_BROWSE_REL,
    CMR_DATA_REL,
    CMR_SERVICE_REL,
    MODIS_PRODUCTS,
)
from earthdash.core.errors import UpstreamUnavailable, ValidationError
from earthdash.core.geo_utils import bbox_around_point
from earthdash.ingestion.http import UpstreamClient

logger = logging.getLogger(__name__)


def _float_or_zero(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _find_link(links: List[Dict[str, Any]], rel: str, needle: str) -> Optional[str]:
    for link in links:
        href = link.get("href") or ""
        if link.get("rel") == rel and needle in href:
            return href
    return None


@dataclass
class GranuleMetadata:
    """One CMR granule entry."""
    id: str
    title: str = ""
    time_start: Optional[str] = None
    time_end: Optional[str] = None
    cloud_cover: float = 0.0
    granule_size: float = 0.0
    download_url: Optional[str] = None
    opendap_url: Optional[str] = None
    browse_url: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: Dict[str, Any]) -> "GranuleMetadata":
        links = entry.get("links") or []
        return cls(
            id=entry.get("id", ""),
            title=entry.get("title", ""),
            time_start=entry.get("time_start"),
            time_end=entry.get("time_end"),
            cloud_cover=_float_or_zero(entry.get("cloud_cover")),
            granule_size=_float_or_zero(entry.get("granule_size")),
            download_url=_find_link(links, CMR_DATA_REL, ".hdf"),
            opendap_url=_find_link(links, CMR_SERVICE_REL, "opendap"),
            browse_url=_find_link(links, CMR_BROWSE_REL, ".jpg"),
        )

    @property
    def acquired_at(self) -> datetime:
        """Granule start time in UTC; now when CMR omits or garbles it."""
        if self.time_start:
            try:
                parsed = datetime.fromisoformat(self.time_start.replace("Z", "+00:00"))
            except ValueError:
                logger.warning(f"Unparseable time_start {self.time_start!r} on {self.id}")
            else:
                return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GranuleSearchResult:
    data_type: str
    product: str
    description: str
    latitude: float
    longitude: float
    temporal: str
    granules: List[GranuleMetadata] = field(default_factory=list)

    @property
    def average_cloud_cover(self) -> float:
        if not self.granules:
            return 0.0
        return round(sum(g.cloud_cover for g in self.granules) / len(self.granules), 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_type": self.data_type,
            "product": self.product,
            "description": self.description,
            "location": {"lat": self.latitude, "lng": self.longitude},
            "temporal": self.temporal,
            "granules": [g.to_dict() for g in self.granules],
            "summary": {
                "total_granules": len(self.granules),
                "average_cloud_cover": self.average_cloud_cover,
            },
        }


class CMRClient(UpstreamClient):
    """
    Client for CMR granule search.

    Public LP DAAC collections are searchable anonymously; an Earthdata
    token is sent when configured.
    """

    SOURCE = "NASA CMR"

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        token = token if token is not None else settings.nasa_earthdata_token
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(timeout=timeout, transport=transport, headers=headers)
        self.search_url = f"{settings.nasa_cmr_url.rstrip('/')}/search/granules.json"

    def search_granules(
        self,
        latitude: float,
        longitude: float,
        data_type: str = "temperature",
        temporal: str = "",
        page_size: int = 20,
    ) -> GranuleSearchResult:
        """
        Search granules of a MODIS product in a 0.2° box around a point.

        Args:
            latitude: Point latitude
            longitude: Point longitude
            data_type: One of MODIS_PRODUCTS (temperature, vegetation, ...)
            temporal: "start,end" ISO dates
            page_size: Maximum granules to return

        Raises:
            ValidationError: for an unknown data type
            UpstreamUnavailable: on any upstream failure
        """
        product = MODIS_PRODUCTS.get(data_type)
        if product is None:
            raise ValidationError(
                f"Invalid data type '{data_type}'. Expected one of: {', '.join(MODIS_PRODUCTS)}"
            )

        west, south, east, north = bbox_around_point(latitude, longitude)
        params = {
            "bounding_box": f"{west},{south},{east},{north}",
            "collection_concept_id": product["collection_id"],
            "page_size": page_size,
        }
        if temporal:
            params["temporal"] = temporal

        logger.info(f"Searching {product['product']} granules near {latitude},{longitude}")
        data = self._get_json(self.search_url, params=params)
        feed = data.get("feed")
        if not isinstance(feed, dict):
            raise UpstreamUnavailable(self.SOURCE, "search response has no feed object")
        entries = [e for e in feed.get("entry") or [] if isinstance(e, dict)]

        return GranuleSearchResult(
            data_type=data_type,
            product=product["product"],
            description=product["description"],
            latitude=latitude,
            longitude=longitude,
            temporal=temporal,
            granules=[GranuleMetadata.from_entry(e) for e in entries],
        )
