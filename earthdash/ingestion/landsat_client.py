"""
EarthDash - Landsat Scene Search
Queries the USGS LandsatLook STAC server for Collection 2 Level-2 surface
reflectance scenes.

STAC API: https://landsatlook.usgs.gov/stac-server
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from earthdash.core.config import settings
from earthdash.ingestion.http import UpstreamClient

logger = logging.getLogger(__name__)

# Friendly band name -> STAC asset key
BAND_ASSETS = {
    "red": "red",
    "green": "green",
    "blue": "blue",
    "nir": "nir08",
    "swir1": "swir16",
    "swir2": "swir22",
}


@dataclass
class LandsatScene:
    """Summary of one STAC item."""
    id: str
    datetime: Optional[str]
    cloud_cover: Optional[float]
    platform: Optional[str]
    instruments: List[str]
    bbox: Optional[List[float]]
    geometry: Optional[Dict[str, Any]]
    available_bands: List[str]
    bands: Dict[str, Optional[Dict[str, Any]]]
    thumbnails: Dict[str, Optional[str]]
    collection: str = "unknown"
    stac_version: str = "1.0.0"
    stac_extensions: List[str] = field(default_factory=list)

    @classmethod
    def from_feature(cls, feature: Dict[str, Any]) -> "LandsatScene":
        properties = feature.get("properties") or {}
        assets = feature.get("assets") or {}
        return cls(
            id=feature.get("id", ""),
            datetime=properties.get("datetime"),
            cloud_cover=properties.get("eo:cloud_cover"),
            platform=properties.get("platform"),
            instruments=properties.get("instruments") or [],
            bbox=feature.get("bbox"),
            geometry=feature.get("geometry"),
            available_bands=list(assets.keys()),
            bands={name: assets.get(key) for name, key in BAND_ASSETS.items()},
            thumbnails={
                "small": (assets.get("thumbnail") or {}).get("href"),
                "large": (assets.get("reduced_resolution_browse") or {}).get("href"),
            },
            collection=feature.get("collection") or "unknown",
            stac_version=feature.get("stac_version") or "1.0.0",
            stac_extensions=feature.get("stac_extensions") or [],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SceneSearchResult:
    total_features: int
    returned_features: int
    scenes: List[LandsatScene]
    stac_version: Optional[str] = None
    links: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_features": self.total_features,
            "returned_features": self.returned_features,
            "features": [s.to_dict() for s in self.scenes],
            "metadata": {
                "stac_version": self.stac_version,
                "type": "FeatureCollection",
                "links": self.links,
            },
        }


def empty_search_result() -> SceneSearchResult:
    """Static sample served when the STAC server is unreachable."""
    return SceneSearchResult(total_features=0, returned_features=0, scenes=[], stac_version="1.0.0")


class LandsatClient(UpstreamClient):
    """Client for the LandsatLook STAC item search."""

    SOURCE = "USGS Landsat STAC"

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport, headers={"Accept": "application/json"})
        self.items_url = settings.landsat_stac_url

    def search(
        self,
        bbox: List[float],
        day: date,
        limit: int = 5,
    ) -> SceneSearchResult:
        """
        Search scenes acquired on a single UTC day.

        Args:
            bbox: [minx, miny, maxx, maxy]
            day: Acquisition date
            limit: Maximum items to return
        """
        day_str = day.isoformat()
        params = {
            "bbox": ",".join(str(v) for v in bbox),
            "limit": limit,
            "datetime": f"{day_str}T00:00:00Z/{day_str}T23:59:59Z",
        }
        logger.info(f"Searching Landsat scenes bbox={params['bbox']} datetime={params['datetime']}")
        data = self._get_json(self.items_url, params=params)

        features = [f for f in data.get("features") or [] if isinstance(f, dict)]
        return SceneSearchResult(
            total_features=data.get("numberMatched") or 0,
            returned_features=data.get("numberReturned") or len(features),
            scenes=[LandsatScene.from_feature(f) for f in features],
            stac_version=data.get("stac_version"),
            links=data.get("links") or [],
        )
