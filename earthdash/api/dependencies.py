"""
EarthDash - FastAPI dependency providers.

Each upstream client and the random source are resolved through these
functions so tests can swap them with `app.dependency_overrides`.
"""

from datetime import datetime, timezone
from typing import Iterator

from earthdash.ingestion.air_quality_client import WAQIClient
from earthdash.ingestion.appeears_client import AppEEARSClient
from earthdash.ingestion.cmr_client import CMRClient
from earthdash.ingestion.firms_client import FIRMSClient
from earthdash.ingestion.geocoding_client import NominatimClient
from earthdash.ingestion.imagery_client import WMTSProxyClient
from earthdash.ingestion.landsat_client import LandsatClient
from earthdash.ingestion.population_client import GeoDBClient, WorldPopClient
from earthdash.ingestion.weather_client import NOAAClient, OpenMeteoClient, OpenWeatherHistoryClient
from earthdash.synthetic.random_source import RandomSource, create_random_source


def get_now() -> datetime:
    return datetime.now(timezone.utc)


def get_random_source() -> RandomSource:
    return create_random_source()


def get_firms_client() -> Iterator[FIRMSClient]:
    with FIRMSClient() as client:
        yield client


def get_open_meteo_client() -> OpenMeteoClient:
    return OpenMeteoClient()


def get_noaa_client() -> Iterator[NOAAClient]:
    with NOAAClient() as client:
        yield client


def get_openweather_client() -> Iterator[OpenWeatherHistoryClient]:
    with OpenWeatherHistoryClient() as client:
        yield client


def get_waqi_client() -> Iterator[WAQIClient]:
    with WAQIClient() as client:
        yield client


def get_landsat_client() -> Iterator[LandsatClient]:
    with LandsatClient() as client:
        yield client


def get_cmr_client() -> Iterator[CMRClient]:
    with CMRClient() as client:
        yield client


def get_geodb_client() -> Iterator[GeoDBClient]:
    with GeoDBClient() as client:
        yield client


def get_worldpop_client() -> Iterator[WorldPopClient]:
    with WorldPopClient() as client:
        yield client


def get_nominatim_client() -> Iterator[NominatimClient]:
    with NominatimClient() as client:
        yield client


def get_wmts_client() -> Iterator[WMTSProxyClient]:
    with WMTSProxyClient() as client:
        yield client


def get_appeears_client() -> Iterator[AppEEARSClient]:
    with AppEEARSClient() as client:
        yield client
