"""
Tests for the NASA FIRMS client and bounding-box filter
"""
import pytest
from datetime import date, datetime, timezone

import httpx

from earthdash.core.errors import UpstreamUnavailable
from earthdash.core.geo_utils import GeoBounds
from earthdash.ingestion.firms_client import (
    FIRMSClient,
    FireDetection,
    LookbackWindow,
    compute_lookback_window,
    feed_for_window,
    filter_fire_detections,
)

FIRE_CSV_HEADER = (
    "latitude,longitude,brightness,scan,track,acq_date,acq_time,"
    "satellite,confidence,version,bright_t31,frp,daynight"
)


class TestFilterFireDetections:
    """Test suite for the CSV bounding-box filter."""

    def test_row_inside_bounds_is_included(self, manhattan_bounds, fire_row):
        """Test a detection inside the box is kept with every column parsed."""
        result = filter_fire_detections(f"{FIRE_CSV_HEADER}\n{fire_row}", manhattan_bounds)

        assert len(result) == 1
        detection = result[0]
        assert detection.latitude == 40.7
        assert detection.longitude == -74.0
        assert detection.brightness == 300.0
        assert detection.acq_date == "2024-01-01"
        assert detection.acq_time == "0130"
        assert detection.satellite == "T"
        assert detection.confidence == "80"
        assert detection.version == "6.1"
        assert detection.bright_t31 == 290.0
        assert detection.frp == 15.2
        assert detection.daynight == "D"

    def test_row_north_of_bounds_is_excluded(self, manhattan_bounds, fire_row):
        """Test the same row moved to latitude 41.0 is dropped."""
        row = fire_row.replace("40.7,", "41.0,", 1)
        assert filter_fire_detections(f"{FIRE_CSV_HEADER}\n{row}", manhattan_bounds) == []

    def test_edges_are_inclusive(self, manhattan_bounds):
        """Test points exactly on the box edges are kept."""
        csv = "\n".join([
            FIRE_CSV_HEADER,
            "40.8,-74.1,300,1,1,2024-01-01,0130,T,80,6.1,290,15.2,D",
            "40.6,-73.9,300,1,1,2024-01-01,0130,T,80,6.1,290,15.2,D",
        ])
        assert len(filter_fire_detections(csv, manhattan_bounds)) == 2

    def test_short_rows_are_excluded(self, manhattan_bounds):
        """Test rows with fewer than 12 columns are dropped."""
        csv = f"{FIRE_CSV_HEADER}\n40.7,-74.0,300,1,1,2024-01-01,0130,T,80,6.1,290"
        assert filter_fire_detections(csv, manhattan_bounds) == []

    def test_missing_daynight_column_defaults_to_empty(self, manhattan_bounds):
        """Test a 12-column row is accepted with an empty day/night flag."""
        csv = f"{FIRE_CSV_HEADER}\n40.7,-74.0,300,1,1,2024-01-01,0130,T,80,6.1,290,15.2"
        result = filter_fire_detections(csv, manhattan_bounds)

        assert len(result) == 1
        assert result[0].daynight == ""

    def test_feed_order_is_preserved(self, manhattan_bounds, fire_csv):
        """Test matches come back in the order they appear in the feed."""
        result = filter_fire_detections(fire_csv, manhattan_bounds)

        assert [(d.latitude, d.longitude) for d in result] == [(40.7, -74.0), (40.75, -74.05)]

    def test_header_is_skipped_without_inspection(self, manhattan_bounds, fire_row):
        """Test the first line is always dropped, even if it is data."""
        assert filter_fire_detections(fire_row, manhattan_bounds) == []

    def test_crlf_line_endings(self, manhattan_bounds, fire_row):
        """Test Windows line endings do not leak into the last column."""
        csv = f"{FIRE_CSV_HEADER}\r\n{fire_row}\r\n"
        result = filter_fire_detections(csv, manhattan_bounds)

        assert len(result) == 1
        assert result[0].daynight == "D"

    def test_unparseable_numbers_default_to_zero(self, manhattan_bounds):
        """Test non-numeric measurement columns become 0."""
        csv = f"{FIRE_CSV_HEADER}\n40.7,-74.0,hot,x,y,2024-01-01,0130,T,80,6.1,n/a,,D"
        result = filter_fire_detections(csv, manhattan_bounds)

        assert len(result) == 1
        assert result[0].brightness == 0
        assert result[0].scan == 0
        assert result[0].bright_t31 == 0
        assert result[0].frp == 0

    @pytest.mark.parametrize("csv_text", [
        "",
        "\n\n\n",
        "header only",
        f"{FIRE_CSV_HEADER}\nabc,def,1,2,3,4,5,6,7,8,9,10,11",
        f"{FIRE_CSV_HEADER}\nnan,inf,1,2,3,4,5,6,7,8,9,10,11",
        f"{FIRE_CSV_HEADER}\n,,,,,,,,,,,,",
        "\x00\x01\x02,,,\n" * 3,
    ])
    def test_malformed_input_never_raises(self, manhattan_bounds, csv_text):
        """Test malformed CSV produces an empty list instead of an error."""
        assert filter_fire_detections(csv_text, manhattan_bounds) == []

    def test_inverted_longitudes_match_nothing(self, fire_csv):
        """Test a box crossing the antimeridian (west > east) is not handled."""
        bounds = GeoBounds(north=90, south=-90, east=-179, west=179)
        assert filter_fire_detections(fire_csv, bounds) == []


class TestLookbackWindow:
    """Test suite for the fire query date window."""

    def test_zero_days_gives_single_day(self):
        """Test days=0 yields start == end."""
        end = date(2024, 1, 10)
        window = compute_lookback_window(end, days=0)

        assert window.start == window.end == end

    def test_default_is_one_day(self):
        """Test the window defaults to one day back."""
        window = compute_lookback_window(date(2024, 1, 10))
        assert window.start == date(2024, 1, 9)

    def test_datetime_is_truncated_to_date(self):
        """Test a datetime end keeps only its calendar date."""
        window = compute_lookback_window(datetime(2024, 3, 1, 23, 59, tzinfo=timezone.utc), days=2)

        assert window.end == date(2024, 3, 1)
        assert window.start == date(2024, 2, 28)
        assert window.to_dict() == {"start": "2024-02-28", "end": "2024-03-01"}

    def test_no_upper_bound(self):
        """Test arbitrarily long windows are accepted."""
        window = compute_lookback_window(date(2024, 1, 1), days=400)
        assert window.days == 400

    @pytest.mark.parametrize("days,feed", [
        (0, "MODIS_C6_1_Global_24h.csv"),
        (1, "MODIS_C6_1_Global_24h.csv"),
        (2, "MODIS_C6_1_Global_48h.csv"),
        (5, "MODIS_C6_1_Global_7d.csv"),
        (30, "MODIS_C6_1_Global_7d.csv"),
    ])
    def test_feed_selection(self, days, feed):
        """Test the smallest covering feed is chosen."""
        assert feed_for_window(compute_lookback_window(date(2024, 1, 31), days)) == feed


class TestFIRMSClient:
    """Test suite for the FIRMS feed client."""

    def test_get_detections_filters_feed(self, mock_transport, manhattan_bounds, fire_csv):
        """Test the downloaded feed is filtered to the box."""
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return httpx.Response(200, text=fire_csv)

        with FIRMSClient(base_url="https://firms.test/csv", transport=mock_transport(handler)) as client:
            window = LookbackWindow(start=date(2024, 1, 1), end=date(2024, 1, 2))
            detections = client.get_detections(manhattan_bounds, window)

        assert requested == ["https://firms.test/csv/MODIS_C6_1_Global_24h.csv"]
        assert len(detections) == 2

    def test_upstream_error_is_raised(self, mock_transport, manhattan_bounds):
        """Test a 500 from the feed surfaces as UpstreamUnavailable."""
        transport = mock_transport(lambda request: httpx.Response(500, text="boom"))

        with FIRMSClient(base_url="https://firms.test/csv", transport=transport) as client:
            with pytest.raises(UpstreamUnavailable) as exc_info:
                client.get_detections(manhattan_bounds, compute_lookback_window(date(2024, 1, 2)))

        assert exc_info.value.status == 500
        assert exc_info.value.source == "NASA FIRMS"

    def test_network_error_is_raised(self, mock_transport, manhattan_bounds):
        """Test a connection failure surfaces as UpstreamUnavailable."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with FIRMSClient(base_url="https://firms.test/csv", transport=mock_transport(handler)) as client:
            with pytest.raises(UpstreamUnavailable):
                client.get_detections(manhattan_bounds, compute_lookback_window(date(2024, 1, 2)))


class TestFireDetectionModel:
    """Test FireDetection data model."""

    def test_defaults_and_serialization(self):
        """Test unset measurement columns default to zero and every column serializes."""
        detection = FireDetection(latitude=40.7, longitude=-74.0, acq_date="2024-01-01", acq_time="0130")
        data = detection.to_dict()

        assert len(data) == 13
        assert data["acq_time"] == "0130"
        assert data["frp"] == 0.0
        assert data["daynight"] == ""
