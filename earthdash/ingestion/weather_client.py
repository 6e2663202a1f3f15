"""
EarthDash - Weather Clients

- Open-Meteo forecast + air quality APIs (free, no authentication), queried
  concurrently since they populate disjoint output fields
- NOAA / National Weather Service gridpoint forecasts (no key, US only)
- OpenWeatherMap One Call "timemachine" history (requires an API key)
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from earthdash.core.config import settings
from earthdash.core.errors import MissingCredentials, UpstreamUnavailable
from earthdash.ingestion.http import UpstreamClient, check_response, decode_json

logger = logging.getLogger(__name__)


@dataclass
class HistoricalWeatherDay:
    """One day of observed or simulated weather."""
    date: str
    temperature: float
    humidity: float
    precipitation: float
    wind_speed: float
    pressure: float
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CurrentConditions:
    """Current weather and air quality snapshot from Open-Meteo."""
    temperature_celsius: Optional[float] = None
    apparent_temperature_celsius: Optional[float] = None
    humidity_percent: Optional[float] = None
    pressure_hpa: Optional[float] = None
    wind_speed_10m: Optional[float] = None
    wind_direction_10m: Optional[float] = None
    precipitation_mm: Optional[float] = None
    aqi_european: Optional[float] = None
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    ozone: Optional[float] = None
    nitrogen_dioxide: Optional[float] = None
    sulphur_dioxide: Optional[float] = None
    carbon_monoxide: Optional[float] = None


@dataclass
class DailySummary:
    """First-day aggregates from Open-Meteo."""
    date: Optional[str] = None
    temp_max_celsius: Optional[float] = None
    temp_min_celsius: Optional[float] = None
    precipitation_sum_mm: Optional[float] = None
    uv_index_max: Optional[float] = None
    shortwave_radiation_sum: Optional[float] = None
    aqi_european_mean: Optional[float] = None
    pm25_mean: Optional[float] = None
    pm10_mean: Optional[float] = None
    ozone_mean: Optional[float] = None


@dataclass
class CurrentWeatherReport:
    latitude: float
    longitude: float
    current: CurrentConditions
    daily: DailySummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": {"lat": self.latitude, "lng": self.longitude},
            "current": asdict(self.current),
            "daily": asdict(self.daily),
        }


@dataclass
class WeatherHistoryReport:
    """Hourly history series, stored column-wise as Open-Meteo returns them."""
    latitude: float
    longitude: float
    days: int
    hourly: Dict[str, List[Any]] = field(default_factory=dict)
    air_quality_hourly: Dict[str, List[Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": {"lat": self.latitude, "lng": self.longitude},
            "days": self.days,
            "hourly": self.hourly,
            "air_quality_hourly": self.air_quality_hourly,
        }


def _first(values: Optional[List[Any]]) -> Any:
    return values[0] if values else None


class OpenMeteoClient:
    """
    Async client for the Open-Meteo weather and air quality APIs.
    Documentation: https://open-meteo.com/en/docs
    """

    WEATHER_SOURCE = "Open-Meteo weather"
    AIR_SOURCE = "Open-Meteo air quality"

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport
        self.weather_url = settings.open_meteo_weather_url
        self.air_url = settings.open_meteo_air_quality_url

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Dict[str, Any],
        source: str,
    ) -> Dict[str, Any]:
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"{source} request failed: {e}")
            raise UpstreamUnavailable(source, str(e) or type(e).__name__) from e
        return decode_json(check_response(response, source), source)

    async def _fetch_pair(
        self,
        weather_params: Dict[str, Any],
        air_params: Dict[str, Any],
    ):
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        ) as client:
            return await asyncio.gather(
                self._fetch(client, self.weather_url, weather_params, self.WEATHER_SOURCE),
                self._fetch(client, self.air_url, air_params, self.AIR_SOURCE),
            )

    async def get_current(
        self,
        latitude: float,
        longitude: float,
        tz: str = "auto",
    ) -> CurrentWeatherReport:
        """
        Get current conditions plus today's aggregates.

        Args:
            latitude: Location latitude (-90 to 90)
            longitude: Location longitude (-180 to 180)
            tz: IANA timezone or "auto"
        """
        weather_params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join([
                "temperature_2m",
                "relative_humidity_2m",
                "apparent_temperature",
                "precipitation",
                "cloud_cover",
                "pressure_msl",
                "wind_speed_10m",
                "wind_direction_10m",
            ]),
            "daily": ",".join([
                "temperature_2m_max",
                "temperature_2m_min",
                "precipitation_sum",
                "uv_index_max",
                "shortwave_radiation_sum",
            ]),
            "forecast_days": 1,
            "timezone": tz,
        }
        air_params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join([
                "european_aqi",
                "pm10",
                "pm2_5",
                "carbon_monoxide",
                "ozone",
                "nitrogen_dioxide",
                "sulphur_dioxide",
            ]),
            "daily": "european_aqi_mean,pm10_mean,pm2_5_mean,ozone_mean",
            "forecast_days": 1,
            "timezone": tz,
        }

        weather, air = await self._fetch_pair(weather_params, air_params)
        current = weather.get("current") or {}
        air_current = air.get("current") or {}
        daily = weather.get("daily") or {}
        air_daily = air.get("daily") or {}

        return CurrentWeatherReport(
            latitude=latitude,
            longitude=longitude,
            current=CurrentConditions(
                temperature_celsius=current.get("temperature_2m"),
                apparent_temperature_celsius=current.get("apparent_temperature"),
                humidity_percent=current.get("relative_humidity_2m"),
                pressure_hpa=current.get("pressure_msl"),
                wind_speed_10m=current.get("wind_speed_10m"),
                wind_direction_10m=current.get("wind_direction_10m"),
                precipitation_mm=current.get("precipitation"),
                aqi_european=air_current.get("european_aqi"),
                pm25=air_current.get("pm2_5"),
                pm10=air_current.get("pm10"),
                ozone=air_current.get("ozone"),
                nitrogen_dioxide=air_current.get("nitrogen_dioxide"),
                sulphur_dioxide=air_current.get("sulphur_dioxide"),
                carbon_monoxide=air_current.get("carbon_monoxide"),
            ),
            daily=DailySummary(
                date=_first(daily.get("time")),
                temp_max_celsius=_first(daily.get("temperature_2m_max")),
                temp_min_celsius=_first(daily.get("temperature_2m_min")),
                precipitation_sum_mm=_first(daily.get("precipitation_sum")),
                uv_index_max=_first(daily.get("uv_index_max")),
                shortwave_radiation_sum=_first(daily.get("shortwave_radiation_sum")),
                aqi_european_mean=_first(air_daily.get("european_aqi_mean")),
                pm25_mean=_first(air_daily.get("pm2_5_mean")),
                pm10_mean=_first(air_daily.get("pm10_mean")),
                ozone_mean=_first(air_daily.get("ozone_mean")),
            ),
        )

    async def get_history(
        self,
        latitude: float,
        longitude: float,
        days: int = 7,
        tz: str = "auto",
    ) -> WeatherHistoryReport:
        """
        Get hourly weather and air quality for the past `days` days.

        Args:
            latitude: Location latitude
            longitude: Location longitude
            days: Days of history (1-16, clamped)
            tz: IANA timezone or "auto"
        """
        days = min(max(days, 1), 16)
        common = {
            "latitude": latitude,
            "longitude": longitude,
            "past_days": days,
            "forecast_days": 0,
            "timezone": tz,
        }
        weather_params = {
            **common,
            "hourly": "temperature_2m,relative_humidity_2m,precipitation,"
                      "cloud_cover,pressure_msl,wind_speed_10m",
        }
        air_params = {**common, "hourly": "european_aqi,pm10,pm2_5,ozone"}

        weather, air = await self._fetch_pair(weather_params, air_params)
        hourly = weather.get("hourly") or {}
        air_hourly = air.get("hourly") or {}

        return WeatherHistoryReport(
            latitude=latitude,
            longitude=longitude,
            days=days,
            hourly={
                "time": hourly.get("time", []),
                "temperature_celsius": hourly.get("temperature_2m", []),
                "humidity_percent": hourly.get("relative_humidity_2m", []),
                "precipitation_mm": hourly.get("precipitation", []),
                "cloud_cover_percent": hourly.get("cloud_cover", []),
                "pressure_hpa": hourly.get("pressure_msl", []),
                "wind_speed_10m": hourly.get("wind_speed_10m", []),
            },
            air_quality_hourly={
                "time": air_hourly.get("time", []),
                "aqi_european": air_hourly.get("european_aqi", []),
                "pm25": air_hourly.get("pm2_5", []),
                "pm10": air_hourly.get("pm10", []),
                "ozone": air_hourly.get("ozone", []),
            },
        )


def fahrenheit_to_celsius(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round((value - 32) * 5 / 9, 1)


class NOAAClient(UpstreamClient):
    """
    Client for the National Weather Service API (api.weather.gov).
    Coverage is limited to the United States.
    """

    SOURCE = "NOAA Weather"

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/geo+json"},
        )
        self.base_url = settings.noaa_api_url.rstrip("/")

    def get_forecast(self, latitude: float, longitude: float, periods: int = 7) -> Dict[str, Any]:
        """
        Resolve the forecast office grid for a point and fetch its forecast.

        Returns:
            Dictionary with location, current period, and upcoming periods
        """
        point = self._get_json(f"{self.base_url}/points/{latitude:.4f},{longitude:.4f}")
        point_properties = point.get("properties")
        if not isinstance(point_properties, dict):
            raise UpstreamUnavailable(self.SOURCE, "point lookup returned no properties")
        forecast_url = point_properties.get("forecast")
        if not forecast_url:
            raise UpstreamUnavailable(self.SOURCE, "point lookup returned no forecast URL")

        data = self._get_json(forecast_url)
        properties = data.get("properties")
        if not isinstance(properties, dict):
            raise UpstreamUnavailable(self.SOURCE, "forecast response has no properties")
        all_periods = [p for p in properties.get("periods") or [] if isinstance(p, dict)]
        location = (point_properties.get("relativeLocation") or {}).get("properties")

        def _temperature_c(period: Dict[str, Any]) -> Optional[float]:
            value = period.get("temperature")
            if period.get("temperatureUnit", "F") == "F":
                return fahrenheit_to_celsius(value)
            return value

        def _value(period: Dict[str, Any], key: str) -> Any:
            return (period.get(key) or {}).get("value")

        first = all_periods[0] if all_periods else {}
        return {
            "location": location,
            "current": {
                "temperature_celsius": _temperature_c(first) if first else None,
                "humidity_percent": _value(first, "relativeHumidity"),
                "wind_speed": first.get("windSpeed"),
                "wind_direction": first.get("windDirection"),
                "short_forecast": first.get("shortForecast"),
                "detailed_forecast": first.get("detailedForecast"),
                "precipitation_probability": _value(first, "probabilityOfPrecipitation"),
                "dewpoint": _value(first, "dewpoint"),
            },
            "forecast": [
                {
                    "name": period.get("name"),
                    "temperature_celsius": _temperature_c(period),
                    "humidity_percent": _value(period, "relativeHumidity"),
                    "wind_speed": period.get("windSpeed"),
                    "short_forecast": period.get("shortForecast"),
                    "precipitation_probability": _value(period, "probabilityOfPrecipitation"),
                    "start_time": period.get("startTime"),
                    "end_time": period.get("endTime"),
                }
                for period in all_periods[:periods]
            ],
            "generated_at": properties.get("generatedAt"),
        }


class OpenWeatherHistoryClient(UpstreamClient):
    """
    Client for OpenWeatherMap One Call 3.0 historical data.
    Requires OPENWEATHER_API_KEY.
    """

    SOURCE = "OpenWeatherMap Historical API"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key if api_key is not None else settings.openweather_api_key
        self.url = settings.openweather_timemachine_url

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_history(
        self,
        latitude: float,
        longitude: float,
        days: int,
        now: Optional[datetime] = None,
    ) -> List[HistoricalWeatherDay]:
        """
        Fetch observations starting `days` days before `now`.

        Raises:
            MissingCredentials: if no API key is configured
            UpstreamUnavailable: on any upstream failure
        """
        if not self.is_configured:
            raise MissingCredentials("OPENWEATHER_API_KEY is not configured")

        now = now or datetime.now(timezone.utc)
        params = {
            "lat": latitude,
            "lon": longitude,
            "dt": int(now.timestamp()) - days * 24 * 60 * 60,
            "appid": self.api_key,
        }
        data = self._get_json(self.url, params=params)
        entries = data.get("data") or []
        if not isinstance(entries, list):
            raise UpstreamUnavailable(self.SOURCE, "history payload has no data list")

        history = []
        for entry in entries:
            try:
                history.append(self._parse_entry(entry))
            except (AttributeError, KeyError, OverflowError, OSError, TypeError, ValueError) as e:
                logger.warning(f"Failed to parse OpenWeatherMap entry: {e!r}")
        return history

    @staticmethod
    def _parse_entry(entry: Dict[str, Any]) -> HistoricalWeatherDay:
        temp = entry["temp"]
        kelvin = temp["day"] if isinstance(temp, dict) else temp
        weather = entry.get("weather") or [{}]
        if not isinstance(weather[0], dict):
            raise TypeError(f"weather condition is {type(weather[0]).__name__}, expected object")
        return HistoricalWeatherDay(
            date=datetime.fromtimestamp(entry["dt"], tz=timezone.utc).date().isoformat(),
            temperature=round(float(kelvin) - 273.15, 1),
            humidity=entry.get("humidity", 0),
            precipitation=(entry.get("rain") or {}).get("1h", 0),
            wind_speed=entry.get("wind_speed", 0),
            pressure=entry.get("pressure", 0),
            description=weather[0].get("description", ""),
        )
