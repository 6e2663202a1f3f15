"""
EarthDash - Data Ingestion Module
Clients for fetching data from external sources.
"""

from earthdash.ingestion.firms_client import (
    FIRMSClient,
    FireDetection,
    LookbackWindow,
    compute_lookback_window,
    filter_fire_detections,
)
from earthdash.ingestion.weather_client import (
    OpenMeteoClient,
    NOAAClient,
    OpenWeatherHistoryClient,
    HistoricalWeatherDay,
    CurrentWeatherReport,
    WeatherHistoryReport,
)
from earthdash.ingestion.air_quality_client import (
    WAQIClient,
    AirQualityReading,
    fallback_reading,
)
from earthdash.ingestion.landsat_client import (
    LandsatClient,
    LandsatScene,
    SceneSearchResult,
    empty_search_result,
)
from earthdash.ingestion.cmr_client import (
    CMRClient,
    GranuleMetadata,
    GranuleSearchResult,
)
from earthdash.ingestion.population_client import (
    GeoDBClient,
    WorldPopClient,
    PopulationSummary,
    CityLookup,
    CountryPopulation,
)
from earthdash.ingestion.geocoding_client import (
    NominatimClient,
    CitySuggestion,
)
from earthdash.ingestion.imagery_client import (
    WMTSProxyClient,
    build_gibs_tile_url,
    list_gibs_layers,
)

__all__ = [
    # FIRMS
    "FIRMSClient",
    "FireDetection",
    "LookbackWindow",
    "compute_lookback_window",
    "filter_fire_detections",
    # Weather
    "OpenMeteoClient",
    "NOAAClient",
    "OpenWeatherHistoryClient",
    "HistoricalWeatherDay",
    "CurrentWeatherReport",
    "WeatherHistoryReport",
    # Air quality
    "WAQIClient",
    "AirQualityReading",
    "fallback_reading",
    # Landsat
    "LandsatClient",
    "LandsatScene",
    "SceneSearchResult",
    "empty_search_result",
    # CMR
    "CMRClient",
    "GranuleMetadata",
    "GranuleSearchResult",
    # Population
    "GeoDBClient",
    "WorldPopClient",
    "PopulationSummary",
    "CityLookup",
    "CountryPopulation",
    # Geocoding
    "NominatimClient",
    "CitySuggestion",
    # Imagery
    "WMTSProxyClient",
    "build_gibs_tile_url",
    "list_gibs_layers",
]
