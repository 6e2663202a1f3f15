"""
EarthDash - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Outbound HTTP
    http_timeout_seconds: float = 30.0
    user_agent: str = "UrbanPlanningDashboard/1.0 (contact@example.com)"

    # NASA FIRMS (global MODIS active fire CSV feeds)
    firms_feed_base_url: str = (
        "https://firms.modaps.eosdis.nasa.gov/data/active_fire/modis-c6.1/csv"
    )

    # Open-Meteo (no authentication)
    open_meteo_weather_url: str = "https://api.open-meteo.com/v1/forecast"
    open_meteo_air_quality_url: str = "https://air-quality-api.open-meteo.com/v1/air-quality"

    # NOAA / National Weather Service
    noaa_api_url: str = "https://api.weather.gov"

    # OpenWeatherMap (historical weather, optional)
    openweather_api_key: Optional[str] = None
    openweather_timemachine_url: str = "https://api.openweathermap.org/data/3.0/onecall/timemachine"

    # WAQI air quality
    waqi_api_url: str = "https://api.waqi.info/feed"
    waqi_token: str = "demo"

    # USGS Landsat STAC
    landsat_stac_url: str = (
        "https://landsatlook.usgs.gov/stac-server/collections/landsat-c2l2-sr/items"
    )

    # NASA Earthdata / CMR
    nasa_cmr_url: str = "https://cmr.earthdata.nasa.gov"
    nasa_earthdata_token: Optional[str] = None
    appeears_api_url: str = "https://appeears.earthdatacloud.nasa.gov/api"

    # Population and geocoding
    geodb_graphql_url: str = "http://geodb-free-service.wirefreethought.com/graphql"
    worldpop_api_url: str = "https://hub.worldpop.org/rest/data/pop/wpgp"
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"

    # Imagery tiles
    nasa_wmts_url: str = "https://map1.vis.earthdata.nasa.gov/wmts-geo/wmts.cgi"

    # Synthetic weather baselines
    synthetic_base_temperature_c: float = 23.3
    synthetic_base_humidity_pct: float = 65.0
    weather_legacy_seasonal: bool = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
