"""
Tests for the granule-based surface temperature heuristic
"""
import random
import pytest
from dataclasses import replace

from earthdash.ingestion.cmr_client import GranuleMetadata
from earthdash.synthetic.granule_temperature import (
    cloud_effect,
    estimate_confidence,
    estimate_temperature_from_granule,
    is_urban_area,
    quality_effect,
    seasonal_base,
    urban_effect,
)

NEW_YORK = (40.7128, -74.0060)
MID_PACIFIC = (0.0, -150.0)


class TestEstimateTemperature:
    """Test suite for estimate_temperature_from_granule."""

    def test_full_cloud_is_colder_than_clear_sky(self, granule):
        """Test 100% cloud cover gives a strictly lower total than 0%."""
        clear = estimate_temperature_from_granule(replace(granule, cloud_cover=0.0), *NEW_YORK, random.Random(1))
        cloudy = estimate_temperature_from_granule(replace(granule, cloud_cover=100.0), *NEW_YORK, random.Random(1))

        assert cloudy.final_temperature_c < clear.final_temperature_c

    def test_new_york_has_positive_urban_effect(self, granule):
        """Test points within 0.5 degrees of New York get 2-5 degrees of warming."""
        for seed in range(20):
            result = estimate_temperature_from_granule(granule, 40.8, -73.9, random.Random(seed))
            assert 2 <= result.urban_effect_c <= 5

    def test_mid_ocean_has_no_urban_effect(self, granule, rng):
        """Test points far from every city get exactly zero."""
        result = estimate_temperature_from_granule(granule, *MID_PACIFIC, rng)
        assert result.urban_effect_c == 0

    def test_terms_sum_to_total(self, granule, rng):
        """Test the reported terms add up to the rounded total."""
        result = estimate_temperature_from_granule(granule, *NEW_YORK, rng)
        total = (
            result.seasonal_base_c
            + result.solar_effect_c
            + result.cloud_effect_c
            + result.urban_effect_c
            + result.quality_effect_c
        )

        assert result.final_temperature_c == pytest.approx(round(total, 2))

    def test_result_is_flagged_synthetic(self, granule, rng):
        """Test results carry the synthetic flag and granule identity."""
        result = estimate_temperature_from_granule(granule, *NEW_YORK, rng)

        assert result.is_synthetic is True
        assert result.granule_id == "G123-LPDAAC"
        assert result.date == "2024-06-15"
        assert result.to_dict()["is_synthetic"] is True

    def test_total_is_within_physical_range(self, rng):
        """Test the total stays inside [-50, 60]."""
        for latitude in (-90, -45, 0, 45, 90):
            for cloud in (0, 50, 100):
                meta = GranuleMetadata(id="g", time_start="2024-01-01T00:00:00Z", cloud_cover=cloud, granule_size=1)
                result = estimate_temperature_from_granule(meta, latitude, 0.0, rng)
                assert -50 <= result.final_temperature_c <= 60


class TestTemperatureTerms:
    """Test the individual heuristic terms."""

    def test_seasonal_base_equator_warmer_than_pole(self):
        """Test the latitude factor cools toward the poles."""
        assert seasonal_base(0, 172) > seasonal_base(60, 172) > seasonal_base(90, 172)

    def test_seasonal_base_spring_equinox(self):
        """Test the seasonal swing is zero around day 80."""
        assert seasonal_base(0, 80) == pytest.approx(30.0)

    def test_cloud_effect_range(self):
        """Test cloud cooling goes from 0 to -8."""
        assert cloud_effect(0) == 0
        assert cloud_effect(100) == -8
        assert cloud_effect(25) > cloud_effect(75)

    @pytest.mark.parametrize("size,expected", [(5, 0.5), (3, 0.0), (1.5, -0.5)])
    def test_quality_effect(self, size, expected):
        """Test file size thresholds."""
        assert quality_effect(size) == expected

    def test_urban_effect_consumes_no_draw_outside_cities(self):
        """Test the random source is untouched away from cities."""
        rng = random.Random(3)
        state = rng.getstate()

        assert urban_effect(*MID_PACIFIC, rng) == 0.0
        assert rng.getstate() == state

    def test_urban_radius(self):
        """Test the 0.5 degree radius around a reference city."""
        assert is_urban_area(40.7128 + 0.4, -74.0060)
        assert not is_urban_area(40.7128 + 0.6, -74.0060)
        assert not is_urban_area(0.0, 0.5)

    def test_confidence_floor(self):
        """Test confidence never drops below 50."""
        assert estimate_confidence(100, 1) == 50
        assert estimate_confidence(10, 5) == 100
