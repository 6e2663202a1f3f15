"""
EarthDash - Synthetic Historical Weather

Plausible daily weather around a baseline, used when no real historical
source is configured or reachable. Output must always be labelled as
simulated by the caller.
"""

import math
from datetime import date, timedelta
from typing import List, Optional

from earthdash.ingestion.weather_client import HistoricalWeatherDay
from earthdash.synthetic.random_source import RandomSource

SIMULATED_SOURCE = "Simulated Data (Fallback)"


def describe_weather(temperature: float, precipitation: float) -> str:
    """Short description; precipitation thresholds take priority over temperature."""
    if precipitation > 10:
        return "Rainy"
    if precipitation > 5:
        return "Light Rain"
    if temperature > 25:
        return "Sunny"
    if temperature > 20:
        return "Partly Cloudy"
    if temperature > 15:
        return "Cloudy"
    return "Overcast"


def seasonal_index(day: date, legacy: bool = False) -> int:
    """
    Position of `day` in the seasonal cycle.

    Day of year normally. With `legacy` set, the day of week with Sunday
    as 0, reproducing the curve older dashboards were drawn with.
    """
    if legacy:
        return (day.weekday() + 1) % 7
    return day.timetuple().tm_yday


def generate_historical_weather(
    days: int,
    base_temperature_c: float,
    base_humidity_pct: float,
    rng: RandomSource,
    today: Optional[date] = None,
    legacy_seasonal: bool = False,
) -> List[HistoricalWeatherDay]:
    """
    Generate `days` daily records ending today, oldest first.

    Args:
        days: Number of days to generate
        base_temperature_c: Mean temperature the series varies around
        base_humidity_pct: Mean relative humidity
        rng: Random source; five draws are consumed per day
        today: Last day of the series (defaults to the current date)
        legacy_seasonal: Use the day-of-week seasonal index

    Returns:
        List of HistoricalWeatherDay
    """
    today = today or date.today()
    series = []

    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)

        temp_variation = (rng.random() - 0.5) * 8
        humidity_variation = (rng.random() - 0.5) * 30
        precip_variation = rng.random() * 20
        seasonal_temp = math.sin(seasonal_index(day, legacy_seasonal) / 365 * 2 * math.pi) * 5

        temperature = round(base_temperature_c + temp_variation + seasonal_temp, 1)
        humidity = max(0, min(100, round(base_humidity_pct + humidity_variation)))
        precipitation = round(precip_variation, 1)

        series.append(HistoricalWeatherDay(
            date=day.isoformat(),
            temperature=temperature,
            humidity=humidity,
            precipitation=precipitation,
            wind_speed=round(rng.random() * 15 + 5, 1),
            pressure=round(1013 + (rng.random() - 0.5) * 20, 1),
            description=describe_weather(temperature, precipitation),
        ))

    return series
