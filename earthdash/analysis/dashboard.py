"""
EarthDash - Dashboard Overview
Joins the per-source readings into the single overview the dashboard's
landing page renders, with derived indicators and a per-source error map.

Open-Meteo is the primary source for weather and air quality; NOAA and WAQI
stand in when it is unavailable. Panels whose sources all failed are
returned with null values so the caller can show them as unavailable.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from earthdash.analysis.urban_metrics import (
    air_quality_score,
    aqi_status,
    environmental_health,
    health_impact,
    heat_index,
    urban_heat_island,
)
from earthdash.core.errors import DashboardError
from earthdash.ingestion.air_quality_client import AirQualityReading
from earthdash.ingestion.landsat_client import SceneSearchResult
from earthdash.ingestion.population_client import PopulationSummary
from earthdash.ingestion.weather_client import CurrentWeatherReport

logger = logging.getLogger(__name__)

# Order of the concurrent upstream calls
DASHBOARD_SOURCES = ("open_meteo", "air_quality", "weather", "population", "landsat")


@dataclass
class DashboardInputs:
    """Whatever each upstream returned; None for sources that failed."""
    latitude: float
    longitude: float
    country: str
    open_meteo: Optional[CurrentWeatherReport] = None
    air_quality: Optional[AirQualityReading] = None
    weather: Optional[Dict[str, Any]] = None
    population: Optional[PopulationSummary] = None
    landsat: Optional[SceneSearchResult] = None
    errors: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return any(self.errors.values())


def air_quality_panel(inputs: DashboardInputs, now: datetime) -> Dict[str, Any]:
    if inputs.open_meteo is not None:
        current = inputs.open_meteo.current
        aqi = current.aqi_european or 0
        return {
            "aqi": aqi,
            "status": aqi_status(aqi).to_dict(),
            "pollutants": {
                "pm25": current.pm25 or 0,
                "pm10": current.pm10 or 0,
                "no2": current.nitrogen_dioxide or 0,
                "o3": current.ozone or 0,
                "so2": current.sulphur_dioxide or 0,
                "co": current.carbon_monoxide or 0,
            },
            "health_impact": health_impact(aqi),
            "last_updated": now.isoformat(),
            "source": "Open-Meteo",
        }

    if inputs.air_quality is not None:
        reading = inputs.air_quality
        return {
            "aqi": reading.aqi,
            "status": aqi_status(reading.aqi).to_dict(),
            "pollutants": reading.pollutants,
            "health_impact": health_impact(reading.aqi),
            "last_updated": reading.timestamp,
            "source": "WAQI",
        }

    return {
        "aqi": None,
        "status": None,
        "pollutants": None,
        "health_impact": "Air quality data is currently unavailable",
        "last_updated": None,
        "source": None,
    }


def weather_panel(inputs: DashboardInputs, now: datetime) -> Dict[str, Any]:
    if inputs.open_meteo is not None:
        current = inputs.open_meteo.current
        return {
            "temperature": current.temperature_celsius,
            "humidity": current.humidity_percent,
            "wind_speed": current.wind_speed_10m,
            "precipitation": current.precipitation_mm,
            "pressure": current.pressure_hpa,
            "forecast": inputs.open_meteo.daily.date or "Current conditions",
            "heat_index": heat_index(current.temperature_celsius, current.humidity_percent),
            "last_updated": now.isoformat(),
            "source": "Open-Meteo",
        }

    if inputs.weather is not None:
        current = inputs.weather.get("current") or {}
        return {
            "temperature": current.get("temperature_celsius"),
            "humidity": current.get("humidity_percent"),
            "wind_speed": current.get("wind_speed"),
            "precipitation": current.get("precipitation_probability"),
            "pressure": None,
            "forecast": current.get("short_forecast"),
            "heat_index": heat_index(current.get("temperature_celsius"), current.get("humidity_percent")),
            "last_updated": inputs.weather.get("generated_at"),
            "source": "NOAA",
        }

    return {
        "temperature": None,
        "humidity": None,
        "wind_speed": None,
        "precipitation": None,
        "pressure": None,
        "forecast": "Weather data is currently unavailable",
        "heat_index": None,
        "last_updated": None,
        "source": None,
    }


def population_panel(inputs: DashboardInputs, now: datetime) -> Dict[str, Any]:
    summary = inputs.population
    if summary is None:
        return {
            "density": None,
            "city": None,
            "country": None,
            "region": None,
            "elevation": None,
            "last_updated": None,
            "source": None,
        }
    return {
        "density": summary.density,
        "city": summary.city,
        "country": summary.country,
        "region": summary.region,
        "elevation": summary.elevation,
        "last_updated": now.isoformat(),
        "source": "GeoDB Cities",
    }


def satellite_panel(inputs: DashboardInputs) -> Dict[str, Any]:
    scenes = inputs.landsat.scenes if inputs.landsat is not None else []
    if not scenes:
        return {
            "latest_image": None,
            "cloud_cover": None,
            "platform": None,
            "available_bands": [],
            "has_error": True,
        }

    latest = scenes[0]
    return {
        "latest_image": latest.to_dict(),
        "cloud_cover": latest.cloud_cover or 0,
        "platform": latest.platform or "Unknown",
        "available_bands": latest.available_bands,
        "has_error": False,
    }


def collect_inputs(
    latitude: float,
    longitude: float,
    country: str,
    results: Sequence[Any],
) -> DashboardInputs:
    """
    Pair gathered results with DASHBOARD_SOURCES.

    Upstream failures are recorded per source. Any other exception is
    re-raised.
    """
    inputs = DashboardInputs(latitude=latitude, longitude=longitude, country=country)
    for source, result in zip(DASHBOARD_SOURCES, results):
        if isinstance(result, DashboardError):
            logger.warning(f"Dashboard source {source} unavailable: {result.message}")
            inputs.errors[source] = result.message
        elif isinstance(result, BaseException):
            raise result
        else:
            setattr(inputs, source, result)
            inputs.errors[source] = None
    return inputs


def build_dashboard(inputs: DashboardInputs, now: datetime) -> Dict[str, Any]:
    """
    Assemble the overview payload.

    Indicators are computed from the values shown in the panels, so a
    metric is null only when the panel it depends on is unavailable.
    """
    air = air_quality_panel(inputs, now)
    weather = weather_panel(inputs, now)
    population = population_panel(inputs, now)

    aqi = air["aqi"]
    temperature = weather["temperature"]
    density = population["density"]
    heat_island = urban_heat_island(temperature)

    if inputs.air_quality is not None:
        name = inputs.air_quality.city
    elif inputs.population is not None:
        name = inputs.population.city
    else:
        name = "Unknown"

    return {
        "timestamp": now.isoformat(),
        "location": {
            "name": name,
            "coordinates": [inputs.latitude, inputs.longitude],
            "country": inputs.country,
        },
        "air_quality": air,
        "weather": weather,
        "population": population,
        "satellite": satellite_panel(inputs),
        "metrics": {
            "urban_heat_island": heat_island.to_dict() if heat_island else None,
            "air_quality_score": air_quality_score(aqi) if aqi is not None else None,
            "population_density": density,
            "environmental_health": (
                environmental_health(aqi, temperature, density)
                if None not in (aqi, temperature, density) else None
            ),
        },
        "errors": {source: inputs.errors.get(source) for source in DASHBOARD_SOURCES},
    }
