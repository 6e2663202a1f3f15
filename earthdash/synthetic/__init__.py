"""
EarthDash - Synthetic Data Module
Generators that stand in for unavailable upstream measurements.
"""

from earthdash.synthetic.random_source import RandomSource, create_random_source
from earthdash.synthetic.weather_generator import (
    SIMULATED_SOURCE,
    describe_weather,
    generate_historical_weather,
)
from earthdash.synthetic.granule_temperature import (
    GranuleSyntheticTemperature,
    estimate_temperature_from_granule,
)

__all__ = [
    "RandomSource",
    "create_random_source",
    "SIMULATED_SOURCE",
    "describe_weather",
    "generate_historical_weather",
    "GranuleSyntheticTemperature",
    "estimate_temperature_from_granule",
]
