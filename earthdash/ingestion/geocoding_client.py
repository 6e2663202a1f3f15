"""
EarthDash - City Suggestions
Autocomplete for city names backed by the OpenStreetMap Nominatim geocoder.

Usage policy: https://operations.osmfoundation.org/policies/nominatim/
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import httpx

from earthdash.core.config import settings
from earthdash.ingestion.http import UpstreamClient

logger = logging.getLogger(__name__)

SETTLEMENT_TYPES = ("city", "town", "village", "hamlet")
MIN_IMPORTANCE = 0.1


@dataclass
class CitySuggestion:
    name: str
    display_name: str
    country: str
    region: str
    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def is_settlement(result: Dict[str, Any]) -> bool:
    """Keep reasonably important settlements that carry a location."""
    display = (result.get("display_name") or "").lower()
    has_type = any(result.get("type") == t or t in display for t in SETTLEMENT_TYPES)
    has_location = bool(result.get("lat")) and bool(result.get("lon"))
    return has_type and has_location and float(result.get("importance") or 0) > MIN_IMPORTANCE


def to_suggestion(result: Dict[str, Any]) -> CitySuggestion:
    address = result.get("address") or {}
    display = result.get("display_name") or ""
    name = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or display.split(",")[0].strip()
    )
    region = address.get("state") or "Unknown"
    country = address.get("country") or "Unknown"
    parts = [name] + [p for p in (address.get("state"), address.get("country")) if p]
    return CitySuggestion(
        name=name,
        display_name=", ".join(parts),
        country=country,
        region=region,
        latitude=float(result["lat"]),
        longitude=float(result["lon"]),
    )


class NominatimClient(UpstreamClient):
    """Client for Nominatim free-text search."""

    SOURCE = "Nominatim"

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport)
        self.url = settings.nominatim_url

    def suggest(self, query: str, limit: int = 5) -> List[CitySuggestion]:
        """
        City suggestions for a partial name. Queries shorter than two
        characters return nothing without calling upstream.
        """
        if len(query.strip()) < 2:
            return []

        params = {
            "q": query,
            "format": "json",
            "addressdetails": 1,
            "limit": limit,
            "dedupe": 1,
        }
        results = self._get_json(self.url, expect=list, params=params)
        suggestions = []
        for result in results:
            if not isinstance(result, dict) or not is_settlement(result):
                continue
            try:
                suggestions.append(to_suggestion(result))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed Nominatim result: {e}")
        return suggestions[:limit]
