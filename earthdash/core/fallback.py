"""
EarthDash - Fallback Policies

Every upstream source declares what the service returns when it fails.
A dashboard panel should never be blank, so most sources degrade to a
static sample or a synthetic model; the few that cannot are marked NONE
and surface the upstream error to the caller.
"""

from enum import Enum
from typing import Dict


class FallbackPolicy(str, Enum):
    """What to serve when an upstream source is unavailable."""

    NONE = "none"
    STATIC_SAMPLE = "static_sample"
    SYNTHETIC_MODEL = "synthetic_model"


FALLBACK_POLICIES: Dict[str, FallbackPolicy] = {
    # Global CSV feed; a fabricated fire is worse than an error
    "fire-detections": FallbackPolicy.NONE,
    # OpenWeatherMap history when keyed, otherwise the synthetic generator
    "historical-weather": FallbackPolicy.SYNTHETIC_MODEL,
    # Open-Meteo current conditions and hourly history
    "weather-current": FallbackPolicy.NONE,
    "weather-history": FallbackPolicy.NONE,
    # NWS gridpoint forecast
    "weather-forecast": FallbackPolicy.NONE,
    # WAQI station feed; moderate sample AQI and pollutant levels
    "air-quality": FallbackPolicy.STATIC_SAMPLE,
    # Landsat STAC search; empty FeatureCollection
    "satellite-scenes": FallbackPolicy.STATIC_SAMPLE,
    # CMR granule metadata
    "granules": FallbackPolicy.NONE,
    # Heuristic land surface temperature built from CMR metadata
    "granule-temperature": FallbackPolicy.SYNTHETIC_MODEL,
    # GeoDB city directory; not-found carries suggestions instead
    "population-lookup": FallbackPolicy.NONE,
    # WorldPop country datasets; sample metropolitan figures
    "population-country": FallbackPolicy.STATIC_SAMPLE,
    # Nominatim geocoder; empty suggestion list
    "city-suggestions": FallbackPolicy.STATIC_SAMPLE,
    # Binary WMTS passthrough
    "tile-proxy": FallbackPolicy.NONE,
    # Overview of several sources; failed panels are returned empty
    "dashboard": FallbackPolicy.STATIC_SAMPLE,
    # AppEEARS product catalogue; MODIS temperature and vegetation products
    "appeears-products": FallbackPolicy.STATIC_SAMPLE,
}

