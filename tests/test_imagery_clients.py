"""
Tests for air quality, Landsat, CMR, AppEEARS and map tile clients
"""
import pytest
from datetime import date

import httpx

from earthdash.core.errors import NotFound, UpstreamUnavailable, ValidationError
from earthdash.ingestion.air_quality_client import AirQualityReading, WAQIClient, fallback_reading
from earthdash.ingestion.appeears_client import (
    AppEEARSClient,
    AppEEARSProduct,
    fallback_products,
    parse_date_range,
    select_products,
)
from earthdash.ingestion.cmr_client import CMRClient, GranuleMetadata
from earthdash.ingestion.imagery_client import WMTSProxyClient, build_gibs_tile_url, list_gibs_layers
from earthdash.ingestion.landsat_client import LandsatClient, empty_search_result


WAQI_OK = {
    "status": "ok",
    "data": {
        "aqi": 72,
        "city": {"name": "New York", "geo": [40.71, -74.0]},
        "time": {"iso": "2024-06-15T12:00:00-04:00"},
        "iaqi": {"pm25": {"v": 72}, "o3": {"v": 31.5}, "t": {"v": 24}, "h": {"v": 55}},
    },
}


class TestWAQIClient:
    """Test suite for the WAQI feed client."""

    def test_reading_by_coordinates(self, mock_transport):
        """Test coords are sent as a geo: feed with the token."""
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json=WAQI_OK)

        with WAQIClient(token="t0k", transport=mock_transport(handler)) as client:
            reading = client.get_reading(coords="40.71,-74.0")

        assert seen[0].path == "/feed/geo:40.71;-74.0/"
        assert seen[0].params["token"] == "t0k"
        assert reading.aqi == 72
        assert reading.city == "New York"
        assert reading.pollutants["pm25"] == 72
        assert reading.pollutants["no2"] == 0
        assert reading.weather["temperature"] == 24
        assert reading.category == "Moderate"
        assert not reading.is_fallback

    def test_station_without_aqi_uses_sample(self, mock_transport):
        """Test a '-' AQI keeps the station but flags sample pollutants."""
        payload = {"status": "ok", "data": {"aqi": "-", "city": {"name": "Somewhere"}}}
        transport = mock_transport(lambda request: httpx.Response(200, json=payload))

        with WAQIClient(transport=transport) as client:
            reading = client.get_reading("somewhere")

        assert reading.is_fallback
        assert reading.aqi == 45
        assert reading.city == "Somewhere"

    def test_error_status_is_upstream_failure(self, mock_transport):
        """Test status 'error' in the body raises UpstreamUnavailable."""
        payload = {"status": "error", "data": "Invalid key"}
        transport = mock_transport(lambda request: httpx.Response(200, json=payload))

        with WAQIClient(transport=transport) as client:
            with pytest.raises(UpstreamUnavailable):
                client.get_reading()

    @pytest.mark.parametrize("payload", [
        [],
        "oops",
        {"status": "ok", "data": ["station"]},
    ])
    def test_malformed_payload_is_upstream_failure(self, mock_transport, payload):
        """Test bodies that are not a WAQI feed object raise UpstreamUnavailable."""
        transport = mock_transport(lambda request: httpx.Response(200, json=payload))

        with WAQIClient(transport=transport) as client:
            with pytest.raises(UpstreamUnavailable):
                client.get_reading()

    def test_mistyped_nested_fields_are_ignored(self, mock_transport):
        """Test non-object city, time and pollutant entries read as missing."""
        payload = {"status": "ok", "data": {"aqi": 40, "city": "NYC", "time": 5, "iaqi": {"pm25": 12}}}
        transport = mock_transport(lambda request: httpx.Response(200, json=payload))

        with WAQIClient(transport=transport) as client:
            reading = client.get_reading()

        assert reading.aqi == 40
        assert reading.city == "Unknown"
        assert reading.pollutants["pm25"] == 0

    @pytest.mark.parametrize("aqi,category", [
        (50, "Good"), (100, "Moderate"), (150, "Unhealthy for Sensitive Groups"),
        (200, "Unhealthy"), (300, "Very Unhealthy"), (301, "Hazardous"),
    ])
    def test_categories(self, aqi, category):
        """Test EPA category boundaries."""
        assert AirQualityReading(aqi=aqi, city="x", timestamp="", pollutants={}).category == category

    def test_fallback_reading(self):
        """Test the static sample is flagged."""
        reading = fallback_reading()

        assert reading.is_fallback
        assert reading.to_dict()["category"] == "Good"


class TestLandsatClient:
    """Test suite for Landsat STAC search."""

    def test_search_builds_day_window(self, mock_transport):
        """Test the datetime filter covers one UTC day and features are summarized."""
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={
                "numberMatched": 3,
                "numberReturned": 1,
                "stac_version": "1.0.0",
                "features": [{
                    "id": "LC09_L2SP_013032_20240615",
                    "properties": {"datetime": "2024-06-15T15:40:00Z", "eo:cloud_cover": 12.5,
                                   "platform": "LANDSAT_9"},
                    "assets": {"red": {"href": "r.tif"}, "thumbnail": {"href": "thumb.jpg"}},
                }],
            })

        with LandsatClient(transport=mock_transport(handler)) as client:
            result = client.search([-74.1, 40.7, -73.9, 40.8], date(2024, 6, 15), limit=5)

        assert seen["datetime"] == "2024-06-15T00:00:00Z/2024-06-15T23:59:59Z"
        assert seen["bbox"] == "-74.1,40.7,-73.9,40.8"
        data = result.to_dict()
        assert data["total_features"] == 3
        scene = data["features"][0]
        assert scene["cloud_cover"] == 12.5
        assert scene["bands"]["red"] == {"href": "r.tif"}
        assert scene["bands"]["nir"] is None
        assert scene["thumbnails"]["small"] == "thumb.jpg"

    def test_empty_result(self):
        """Test the fallback collection is empty."""
        data = empty_search_result().to_dict()

        assert data["features"] == []
        assert data["metadata"]["type"] == "FeatureCollection"

    def test_non_object_body_is_upstream_failure(self, mock_transport):
        """Test a JSON array from the STAC server raises UpstreamUnavailable."""
        transport = mock_transport(lambda request: httpx.Response(200, json=[]))

        with LandsatClient(transport=transport) as client:
            with pytest.raises(UpstreamUnavailable):
                client.search([-74.1, 40.7, -73.9, 40.8], date(2024, 6, 15))


class TestCMRClient:
    """Test suite for NASA CMR granule search."""

    def test_search_granules(self, mock_transport):
        """Test granule metadata and links are extracted."""
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"feed": {"entry": [
                {
                    "id": "G1", "title": "MOD11A1.A2024167", "time_start": "2024-06-15T15:30:00.000Z",
                    "cloud_cover": "40", "granule_size": "3.2",
                    "links": [
                        {"rel": "http://esipfed.org/ns/fedsearch/1.1/data#", "href": "https://x/MOD11A1.hdf"},
                        {"rel": "http://esipfed.org/ns/fedsearch/1.1/browse#", "href": "https://x/b.jpg"},
                    ],
                },
                {"id": "G2", "cloud_cover": None},
            ]}})

        with CMRClient(token="edl", transport=mock_transport(handler)) as client:
            result = client.search_granules(40.0, -74.0, temporal="2024-06-01,2024-06-15")

        assert seen["bounding_box"] == "-74.1,39.9,-73.9,40.1"
        assert seen["temporal"] == "2024-06-01,2024-06-15"
        assert seen["auth"] == "Bearer edl"
        assert [g.id for g in result.granules] == ["G1", "G2"]
        assert result.granules[0].cloud_cover == 40.0
        assert result.granules[0].download_url == "https://x/MOD11A1.hdf"
        assert result.granules[0].browse_url == "https://x/b.jpg"
        assert result.granules[1].cloud_cover == 0.0
        assert result.average_cloud_cover == 20.0

    @pytest.mark.parametrize("payload", [[], {"feed": "none"}])
    def test_malformed_body_is_upstream_failure(self, mock_transport, payload):
        """Test a body without a feed object raises UpstreamUnavailable."""
        transport = mock_transport(lambda request: httpx.Response(200, json=payload))

        with CMRClient(transport=transport) as client:
            with pytest.raises(UpstreamUnavailable):
                client.search_granules(40.0, -74.0)

    def test_unknown_data_type(self):
        """Test an unknown product name is a validation error."""
        with CMRClient() as client:
            with pytest.raises(ValidationError):
                client.search_granules(40.0, -74.0, data_type="radiation")

    def test_unparseable_time_falls_back_to_now(self):
        """Test a garbled time_start still yields an aware datetime."""
        granule = GranuleMetadata(id="g", time_start="yesterday")
        assert granule.acquired_at.tzinfo is not None


class TestAppEEARSClient:
    """Test suite for the AppEEARS product catalogue."""

    def test_list_products(self, mock_transport):
        """Test catalogue records are mapped and non-objects skipped."""
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json=[
                {"Product": "MOD11A1", "Platform": "Terra MODIS", "ProductAndVersion": "MOD11A1.061",
                 "Available": True, "DOI": "10.5067/MODIS/MOD11A1.061"},
                "garbage",
            ])

        with AppEEARSClient(transport=mock_transport(handler)) as client:
            products = client.list_products(limit=5)

        assert seen[0].path == "/api/product"
        assert seen[0].params["limit"] == "5"
        assert len(products) == 1
        assert products[0].product_and_version == "MOD11A1.061"
        assert products[0].available is True
        assert products[0].doi == "10.5067/MODIS/MOD11A1.061"
        assert products[0].raster_type == ""

    def test_object_body_is_upstream_failure(self, mock_transport):
        """Test a catalogue that is not a JSON array raises UpstreamUnavailable."""
        transport = mock_transport(lambda request: httpx.Response(200, json={"message": "maintenance"}))

        with AppEEARSClient(transport=transport) as client:
            with pytest.raises(UpstreamUnavailable):
                client.list_products()

    def test_fallback_products(self):
        products = fallback_products()

        assert [p.product for p in products] == ["MOD11A1", "MOD13Q1"]
        assert all(p.available and not p.deleted for p in products)

    def test_select_products(self):
        """Test named products are filtered and the default is the first ten."""
        catalogue = [AppEEARSProduct.from_record({"Product": f"P{i}"}) for i in range(12)]

        assert [p.product for p in select_products(catalogue, ["P3", "P11", "missing"])] == ["P3", "P11"]
        assert len(select_products(catalogue)) == 10
        assert len(select_products(catalogue, [])) == 10

    def test_parse_date_range(self):
        assert parse_date_range("2024-06-01, 2024-06-15") == (date(2024, 6, 1), date(2024, 6, 15))

    @pytest.mark.parametrize("value", ["2024-06-01", "2024-06-01,soon", "2024-06-15,2024-06-01", ""])
    def test_parse_date_range_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_date_range(value)


class TestGIBSTiles:
    """Test GIBS layer listing and tile URLs."""

    def test_list_layers(self):
        """Test every layer has a templated URL."""
        layers = list_gibs_layers()

        assert layers
        assert all("{time}" in layer["url"] and "{z}" in layer["url"] for layer in layers)

    def test_build_tile_url(self):
        """Test the URL is filled with layer product, date and tile indices."""
        layer = list_gibs_layers()[0]["id"]
        url = build_gibs_tile_url(layer, 3, 2, 1, date(2024, 6, 15))

        assert "/2024-06-15/" in url
        assert url.endswith("/3/1/2.jpg") or url.endswith("/3/1/2.png")

    def test_unknown_layer(self):
        """Test an unknown layer id is not found."""
        with pytest.raises(NotFound):
            build_gibs_tile_url("no-such-layer", 1, 0, 0)


class TestWMTSProxyClient:
    """Test suite for the WMTS tile passthrough."""

    PARAMS = {
        "service": "WMTS", "request": "GetTile", "version": "1.0.0",
        "layer": "MODIS_Terra_CorrectedReflectance_TrueColor", "style": "default",
        "tilematrixset": "250m", "tilematrix": "3", "tilerow": "1", "tilecol": "2",
        "format": "image/jpeg", "time": "2024-06-15",
    }

    def test_fetch_tile(self, mock_transport):
        """Test parameters are upper-cased and bytes passed through."""
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, content=b"\xff\xd8jpeg", headers={"content-type": "image/jpeg"})

        with WMTSProxyClient(transport=mock_transport(handler)) as client:
            tile = client.fetch_tile(self.PARAMS)

        assert seen["LAYER"] == "MODIS_Terra_CorrectedReflectance_TrueColor"
        assert seen["TILEMATRIX"] == "3"
        assert tile.content == b"\xff\xd8jpeg"
        assert tile.media_type == "image/jpeg"

    def test_missing_parameters(self):
        """Test missing required parameters are listed."""
        with WMTSProxyClient() as client:
            with pytest.raises(ValidationError) as exc_info:
                client.fetch_tile({"layer": "x"})

        assert "tilematrix" in exc_info.value.details["missing"]
