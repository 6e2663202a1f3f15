"""
Tests for urban planning indicators
"""
import pytest

from earthdash.analysis.urban_metrics import (
    air_quality_score,
    aqi_status,
    environmental_health,
    health_impact,
    heat_index,
    round_half_up,
    urban_heat_island,
)


class TestAQIStatus:
    """Test suite for AQI display bands."""

    @pytest.mark.parametrize("aqi,status,color,level", [
        (0, "Good", "green", 1),
        (50, "Good", "green", 1),
        (51, "Moderate", "yellow", 2),
        (150, "Unhealthy for Sensitive Groups", "orange", 3),
        (200, "Unhealthy", "red", 4),
        (300, "Very Unhealthy", "purple", 5),
        (301, "Hazardous", "maroon", 6),
    ])
    def test_bands(self, aqi, status, color, level):
        """Test band edges are inclusive at the top."""
        result = aqi_status(aqi)
        assert (result.status, result.color, result.level) == (status, color, level)

    def test_to_dict(self):
        assert aqi_status(75).to_dict() == {"status": "Moderate", "color": "yellow", "level": 2}

    def test_health_impact(self):
        """Test advice follows the same bands."""
        assert health_impact(20) == "Low risk - Air quality is satisfactory"
        assert health_impact(180) == "Very high risk - Everyone should limit outdoor activity"
        assert health_impact(500) == "Dangerous - Stay indoors"


class TestHeatIndex:
    """Test suite for the Rothfusz heat index."""

    def test_hot_and_humid(self):
        """Test 35C at 50% feels like about 40.7C."""
        assert heat_index(35, 50) == 40.7

    @pytest.mark.parametrize("temperature,humidity", [(None, 50), (30, None), (0, 50), (30, 0)])
    def test_missing_inputs(self, temperature, humidity):
        assert heat_index(temperature, humidity) is None


class TestUrbanHeatIsland:
    """Test suite for heat island intensity."""

    @pytest.mark.parametrize("temperature,intensity,level", [
        (30.0, 3, "High"),
        (25.0, 2, "Moderate"),
        (22.0, 1, "Low"),
        (20.0, 0, "Low"),
        (10.0, -3, "Low"),
    ])
    def test_levels(self, temperature, intensity, level):
        result = urban_heat_island(temperature)
        assert result.intensity == intensity
        assert result.level == level

    def test_zero_degrees_is_a_reading(self):
        """Test freezing temperatures still produce an estimate."""
        assert urban_heat_island(0.0).intensity == -6

    def test_missing_temperature(self):
        assert urban_heat_island(None) is None


class TestScores:
    """Test suite for air quality and environmental health scores."""

    def test_air_quality_score(self):
        assert air_quality_score(40) == 80.0
        assert air_quality_score(300) == 0.0

    def test_air_quality_score_without_reading(self):
        """Test a missing or zero AQI scores 85."""
        assert air_quality_score(0) == 85.0
        assert air_quality_score(None) == 85.0

    def test_environmental_health(self):
        """Test the score averages air, thermal comfort and crowding."""
        # air 84, thermal 95, crowding 98.88
        assert environmental_health(32, 24.5, 1120) == 93

    def test_environmental_health_components_floor_at_zero(self):
        assert environmental_health(500, 100, 500_000) == 0

    def test_environmental_health_neutral_when_missing(self):
        assert environmental_health(None, None, None) == 50
        assert environmental_health(0, 22, None) == 67


class TestRounding:
    """Test suite for half-up rounding."""

    @pytest.mark.parametrize("value,digits,expected", [
        (2.5, 0, 3.0),
        (-2.5, 0, -2.0),
        (1.25, 1, 1.3),
        (0.44, 1, 0.4),
    ])
    def test_round_half_up(self, value, digits, expected):
        assert round_half_up(value, digits) == pytest.approx(expected)
