"""
EarthDash - Air Quality Client
Fetches station readings from the World Air Quality Index (WAQI) feed API.

API Documentation: https://aqicn.org/json-api/doc/
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from earthdash.core.config import settings
from earthdash.core.constants import AIR_QUALITY_FALLBACK_AQI, AIR_QUALITY_FALLBACK_POLLUTANTS
from earthdash.core.errors import UpstreamUnavailable
from earthdash.ingestion.http import UpstreamClient

logger = logging.getLogger(__name__)

POLLUTANT_KEYS = ("pm25", "pm10", "no2", "o3", "co", "so2")


@dataclass
class AirQualityReading:
    """Air quality index and pollutant concentrations for one station."""
    aqi: float
    city: str
    timestamp: str
    pollutants: Dict[str, float]
    status: str = "ok"
    location: Optional[list] = None
    weather: Dict[str, Optional[float]] = field(default_factory=dict)
    forecast: Optional[dict] = None
    is_fallback: bool = False

    @property
    def category(self) -> str:
        """US EPA AQI category."""
        if self.aqi <= 50:
            return "Good"
        elif self.aqi <= 100:
            return "Moderate"
        elif self.aqi <= 150:
            return "Unhealthy for Sensitive Groups"
        elif self.aqi <= 200:
            return "Unhealthy"
        elif self.aqi <= 300:
            return "Very Unhealthy"
        return "Hazardous"

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["category"] = self.category
        return result


def fallback_reading(city: str = "Sample City") -> AirQualityReading:
    """Static moderate-air sample served when WAQI is unreachable."""
    return AirQualityReading(
        aqi=AIR_QUALITY_FALLBACK_AQI,
        city=city,
        timestamp=datetime.now(timezone.utc).isoformat(),
        pollutants=dict(AIR_QUALITY_FALLBACK_POLLUTANTS),
        status="fallback",
        is_fallback=True,
    )


def _object(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _valid_aqi(value: Any) -> bool:
    # WAQI reports "-" for stations without a current reading
    return isinstance(value, (int, float)) and value > 0


class WAQIClient(UpstreamClient):
    """
    Client for the WAQI feed endpoint.

    Usage:
        with WAQIClient() as client:
            reading = client.get_reading(coords="40.71,-74.00")
    """

    SOURCE = "WAQI"

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport, headers={"Accept": "application/json"})
        self.token = token or settings.waqi_token
        self.base_url = settings.waqi_api_url.rstrip("/")

    def get_reading(self, location: str = "here", coords: Optional[str] = None) -> AirQualityReading:
        """
        Get the nearest station reading.

        Args:
            location: City name or "here" (IP based)
            coords: "lat;lng" or "lat,lng"; takes precedence over location

        Returns:
            AirQualityReading; pollutant values are replaced by the static
            sample and flagged when the station has no valid AQI

        Raises:
            UpstreamUnavailable: on network failure, bad status, or status != "ok"
        """
        target = f"geo:{coords.replace(',', ';')}" if coords else location
        payload = self._get_json(f"{self.base_url}/{target}/", params={"token": self.token})

        if payload.get("status") != "ok":
            raise UpstreamUnavailable(self.SOURCE, f"feed status {payload.get('status')!r}: {payload.get('data')}")

        data = payload.get("data")
        if not isinstance(data, dict):
            raise UpstreamUnavailable(self.SOURCE, f"feed data is {type(data).__name__}, expected object")
        iaqi = _object(data.get("iaqi"))
        has_valid = _valid_aqi(data.get("aqi"))

        def _v(key: str) -> Optional[float]:
            return _object(iaqi.get(key)).get("v")

        if has_valid:
            pollutants = {key: _v(key) or 0 for key in POLLUTANT_KEYS}
        else:
            logger.warning(f"WAQI returned no valid AQI for {target}, using sample pollutants")
            pollutants = dict(AIR_QUALITY_FALLBACK_POLLUTANTS)

        city = _object(data.get("city"))
        return AirQualityReading(
            aqi=data["aqi"] if has_valid else AIR_QUALITY_FALLBACK_AQI,
            city=city.get("name") or "Unknown",
            timestamp=_object(data.get("time")).get("iso") or datetime.now(timezone.utc).isoformat(),
            pollutants=pollutants,
            location=city.get("geo"),
            weather={
                "temperature": _v("t"),
                "humidity": _v("h"),
                "pressure": _v("p"),
                "wind": _v("w"),
            },
            forecast=_object(data.get("forecast")).get("daily"),
            is_fallback=not has_valid,
        )
