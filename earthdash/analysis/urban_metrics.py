"""
EarthDash - Urban Planning Indicators
Scores derived from live readings: AQI status and health advice, heat index,
urban heat island intensity, air quality score and a composite
environmental health score.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional
import math

from earthdash.core.constants import (
    AQI_HAZARDOUS,
    AQI_LEVELS,
    COMFORT_TEMPERATURE_C,
    NEUTRAL_COMPONENT_SCORE,
    NO_READING_AIR_SCORE,
    UHI_BASELINE_TEMPERATURE_C,
)


@dataclass
class AQIStatus:
    """Display band for an AQI value."""
    status: str
    color: str
    level: int  # 1 (good) to 6 (hazardous)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class HeatIsland:
    """Urban heat island estimate relative to a rural baseline."""
    intensity: int
    level: str  # Low, Moderate, High

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3, -2.5 -> -2)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _aqi_band(aqi: float):
    for level, (upper, status, color, advice) in enumerate(AQI_LEVELS, start=1):
        if aqi <= upper:
            return level, status, color, advice
    return (len(AQI_LEVELS) + 1, *AQI_HAZARDOUS)


def aqi_status(aqi: float) -> AQIStatus:
    level, status, color, _ = _aqi_band(aqi)
    return AQIStatus(status=status, color=color, level=level)


def health_impact(aqi: float) -> str:
    return _aqi_band(aqi)[3]


def heat_index(temperature_c: Optional[float], humidity_pct: Optional[float]) -> Optional[float]:
    """
    Apparent temperature from the NWS Rothfusz regression.

    Args:
        temperature_c: Air temperature in Celsius
        humidity_pct: Relative humidity in percent

    Returns:
        Heat index in Celsius to one decimal, or None when either input is
        missing or zero
    """
    if not temperature_c or not humidity_pct:
        return None

    t = temperature_c * 9 / 5 + 32
    rh = humidity_pct
    hi = (
        -42.379
        + 2.04901523 * t
        + 10.14333127 * rh
        - 0.22475541 * t * rh
        - 6.83783e-3 * t * t
        - 5.481717e-2 * rh * rh
        + 1.22874e-3 * t * t * rh
        + 8.5282e-4 * t * rh * rh
        - 1.99e-6 * t * t * rh * rh
    )
    return round_half_up((hi - 32) * 5 / 9, 1)


def urban_heat_island(temperature_c: Optional[float]) -> Optional[HeatIsland]:
    """Heat island intensity from the current city temperature alone."""
    if temperature_c is None:
        return None

    intensity = int(round_half_up((temperature_c - UHI_BASELINE_TEMPERATURE_C) * 0.3))
    if temperature_c > 25:
        level = "High"
    elif temperature_c > 22:
        level = "Moderate"
    else:
        level = "Low"
    return HeatIsland(intensity=intensity, level=level)


def air_quality_score(aqi: Optional[float]) -> float:
    """0-100 score, higher is cleaner. A missing or zero AQI scores 85."""
    if not aqi:
        return NO_READING_AIR_SCORE
    return max(0.0, 100 - aqi * 0.5)


def environmental_health(
    aqi: Optional[float],
    temperature_c: Optional[float],
    population_density: Optional[float],
) -> int:
    """
    Composite 0-100 score averaging air, thermal comfort and crowding.

    Each missing (or zero) input contributes a neutral 50.
    """
    air = max(0.0, 100 - aqi * 0.5) if aqi else NEUTRAL_COMPONENT_SCORE
    thermal = (
        max(0.0, 100 - abs(temperature_c - COMFORT_TEMPERATURE_C) * 2)
        if temperature_c else NEUTRAL_COMPONENT_SCORE
    )
    crowding = max(0.0, 100 - population_density / 1000) if population_density else NEUTRAL_COMPONENT_SCORE
    return int(round_half_up((air + thermal + crowding) / 3))
