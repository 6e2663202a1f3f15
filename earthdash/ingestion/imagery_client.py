"""
EarthDash - Satellite Imagery Tiles

GIBS tile URLs are built locally from a fixed layer catalogue; WMTS tiles
are fetched from NASA and passed through byte for byte.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

import httpx

from earthdash.core.config import settings
from earthdash.core.constants import GIBS_LAYERS, GIBS_MAX_ZOOM, GIBS_TILE_TEMPLATE, WMTS_REQUIRED_PARAMS
from earthdash.core.errors import NotFound, ValidationError
from earthdash.ingestion.http import UpstreamClient

logger = logging.getLogger(__name__)


def list_gibs_layers() -> List[Dict[str, Any]]:
    return [
        {
            "id": layer_id,
            "name": name,
            "description": description,
            "url": GIBS_TILE_TEMPLATE.replace("{product}", product),
            "attribution": "NASA GIBS",
            "max_zoom": GIBS_MAX_ZOOM,
            "temporal": True,
            "time_format": "YYYY-MM-DD",
        }
        for layer_id, (product, name, description) in GIBS_LAYERS.items()
    ]


def build_gibs_tile_url(layer: str, z: int, x: int, y: int, time: Optional[date] = None) -> str:
    """
    Tile URL for a GIBS layer.

    Raises:
        NotFound: for an unknown layer id
    """
    if layer not in GIBS_LAYERS:
        raise NotFound(f"Layer '{layer}' not found")
    product = GIBS_LAYERS[layer][0]
    return GIBS_TILE_TEMPLATE.format(
        product=product,
        time=(time or date.today()).isoformat(),
        z=z,
        x=x,
        y=y,
    )


@dataclass
class Tile:
    content: bytes
    media_type: str


class WMTSProxyClient(UpstreamClient):
    """Fetches WMTS tiles from NASA's Earthdata tile service."""

    SOURCE = "NASA WMTS"

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport, headers={"Accept": "image/*"})
        self.url = settings.nasa_wmts_url

    def fetch_tile(self, params: Mapping[str, Optional[str]]) -> Tile:
        """
        Proxy one GetTile request.

        Args:
            params: Lower-case WMTS parameters; all of WMTS_REQUIRED_PARAMS must be set

        Raises:
            ValidationError: when a required parameter is missing
            UpstreamUnavailable: on any upstream failure
        """
        missing = [name for name in WMTS_REQUIRED_PARAMS if not params.get(name)]
        if missing:
            raise ValidationError(
                "Missing required WMTS parameters",
                details={"missing": missing},
            )

        query = {name.upper(): params[name] for name in WMTS_REQUIRED_PARAMS}
        response = self._request("GET", self.url, params=query)
        return Tile(
            content=response.content,
            media_type=response.headers.get("content-type", "image/jpeg"),
        )
