"""
EarthDash - REST API

FastAPI application serving the dashboard panels: fire detections, weather,
air quality, satellite scenes and granules, AppEEARS products, population,
map tiles and the combined overview.
Every JSON endpoint answers with the envelope from `earthdash.api.envelope`.

Run with: uvicorn earthdash.api.main:app --reload
"""

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from earthdash import __version__
from earthdash.analysis.dashboard import build_dashboard, collect_inputs
from earthdash.api import dependencies as deps
from earthdash.api.envelope import Envelope, degraded, failure, ok
from earthdash.core.config import settings
from earthdash.core.constants import GIBS_MAX_ZOOM, POPULATION_FALLBACK
from earthdash.core.errors import (
    DashboardError,
    InternalError,
    MissingCredentials,
    NotFound,
    UpstreamUnavailable,
    ValidationError,
)
from earthdash.core.fallback import FALLBACK_POLICIES
from earthdash.core.geo_utils import GeoBounds, parse_bbox, parse_coords
from earthdash.core.logging import setup_logging
from earthdash.ingestion.air_quality_client import WAQIClient, fallback_reading
from earthdash.ingestion.appeears_client import (
    AppEEARSClient,
    fallback_products,
    parse_date_range,
    select_products,
)
from earthdash.ingestion.cmr_client import CMRClient
from earthdash.ingestion.firms_client import FIRMSClient, compute_lookback_window
from earthdash.ingestion.geocoding_client import NominatimClient
from earthdash.ingestion.imagery_client import WMTSProxyClient, build_gibs_tile_url, list_gibs_layers
from earthdash.ingestion.landsat_client import LandsatClient, empty_search_result
from earthdash.ingestion.population_client import GeoDBClient, WorldPopClient
from earthdash.ingestion.weather_client import NOAAClient, OpenMeteoClient, OpenWeatherHistoryClient
from earthdash.synthetic.granule_temperature import estimate_temperature_from_granule
from earthdash.synthetic.random_source import RandomSource
from earthdash.synthetic.weather_generator import SIMULATED_SOURCE, generate_historical_weather

setup_logging()
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="EarthDash",
    description="Urban planning dashboard API combining NASA, NOAA and open geodata sources",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class BoundsModel(BaseModel):
    """Geographic bounding box; ordering of the edges is not enforced."""
    north: float
    south: float
    east: float
    west: float


class FireDetectionRequest(BaseModel):
    """Request body for fire detections."""
    bounds: BoundsModel
    token: Optional[str] = None
    days: int = Field(default=1, ge=0)


class AppEEARSRequest(BaseModel):
    """Area request for AppEEARS products."""
    bounds: BoundsModel
    products: List[str] = Field(default_factory=list)
    temporal: Optional[str] = Field(default=None, description="YYYY-MM-DD,YYYY-MM-DD")
    token: Optional[str] = None


class PopulationRequest(BaseModel):
    """Population lookup by coordinates or by city name."""
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    city: Optional[str] = None


class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    sources: dict


# ============================================================================
# Error Handlers
# ============================================================================

def _error_response(exc: DashboardError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(failure(exc)),
    )


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    if isinstance(exc, UpstreamUnavailable):
        logger.error(f"{request.url.path} failed upstream: {exc.message}")
    else:
        logger.info(f"{request.url.path} rejected: {exc.message}")
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _error_response(
        ValidationError("Invalid request parameters", details={"errors": jsonable_encoder(exc.errors())})
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return _error_response(InternalError(str(exc) or type(exc).__name__))


def _cache(response: Response, max_age: int, stale: Optional[int] = None) -> None:
    value = f"public, s-maxage={max_age}"
    if stale:
        value += f", stale-while-revalidate={stale}"
    response.headers["Cache-Control"] = value


# ============================================================================
# Health
# ============================================================================

@app.get("/", tags=["Health"])
async def root():
    """API root - basic info."""
    return {
        "name": "EarthDash API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(now: datetime = Depends(deps.get_now)):
    """Service status and the fallback policy of every data source."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=now.isoformat(),
        sources={name: policy.value for name, policy in FALLBACK_POLICIES.items()},
    )


# ============================================================================
# Dashboard Overview
# ============================================================================

@app.get("/api/v1/dashboard", response_model=Envelope, tags=["Dashboard"])
async def dashboard(
    response: Response,
    location: str = Query(default="here"),
    coords: str = Query(default="40.7128,-74.0060", description="lat,lng"),
    country: str = Query(default="USA"),
    bbox: str = Query(default="-74.1,40.7,-73.9,40.8", description="minx,miny,maxx,maxy"),
    open_meteo: OpenMeteoClient = Depends(deps.get_open_meteo_client),
    waqi: WAQIClient = Depends(deps.get_waqi_client),
    noaa: NOAAClient = Depends(deps.get_noaa_client),
    geodb: GeoDBClient = Depends(deps.get_geodb_client),
    landsat: LandsatClient = Depends(deps.get_landsat_client),
    now: datetime = Depends(deps.get_now),
):
    """
    Weather, air quality, population and imagery for one place in one call.

    Sources are queried concurrently. A failed source leaves its panel
    empty and is named in `errors`; the response is then flagged fallback.
    """
    point = parse_coords(coords)
    box = parse_bbox(bbox)

    results = await asyncio.gather(
        open_meteo.get_current(point.latitude, point.longitude),
        run_in_threadpool(waqi.get_reading, location=location, coords=coords),
        run_in_threadpool(noaa.get_forecast, point.latitude, point.longitude),
        run_in_threadpool(geodb.nearest_place, point.latitude, point.longitude),
        run_in_threadpool(landsat.search, box, now.date()),
        return_exceptions=True,
    )
    inputs = collect_inputs(point.latitude, point.longitude, country, results)
    data = build_dashboard(inputs, now)

    _cache(response, 900, 1800)
    if inputs.has_errors:
        return degraded(data, source="EarthDash overview")
    return ok(data, source="EarthDash overview")


# ============================================================================
# Fire Detections
# ============================================================================

@app.post("/api/v1/fire-detections", response_model=Envelope, tags=["Fires"])
def fire_detections(
    body: FireDetectionRequest,
    client: FIRMSClient = Depends(deps.get_firms_client),
    now: datetime = Depends(deps.get_now),
):
    """
    Active fire detections inside a bounding box.

    Upstream failures are not masked: a fabricated fire is worse than none.
    """
    if not body.token:
        raise MissingCredentials("NASA token required")

    bounds = GeoBounds(**body.bounds.model_dump())
    window = compute_lookback_window(now, body.days)
    detections = client.get_detections(bounds, window)

    return ok(
        {
            "detections": [d.to_dict() for d in detections],
            "count": len(detections),
            "bounds": bounds.to_dict(),
            "date_range": window.to_dict(),
        },
        source=client.SOURCE,
    )


# ============================================================================
# Weather
# ============================================================================

@app.get("/api/v1/historical-weather", response_model=Envelope, tags=["Weather"])
def historical_weather(
    response: Response,
    coords: str = Query(default="40.7128,-74.0060", description="lat,lng"),
    days: int = Query(default=7, ge=1, le=365),
    client: OpenWeatherHistoryClient = Depends(deps.get_openweather_client),
    rng: RandomSource = Depends(deps.get_random_source),
    now: datetime = Depends(deps.get_now),
):
    """
    Daily weather for the past `days` days.

    Uses OpenWeatherMap when an API key is configured; otherwise, or when
    that call fails, serves the synthetic generator flagged as fallback.
    """
    point = parse_coords(coords)
    _cache(response, 3600, 7200)

    data = {
        "location": {"lat": point.latitude, "lng": point.longitude},
        "date_range": {
            "start": (now.date() - timedelta(days=days - 1)).isoformat(),
            "end": now.date().isoformat(),
        },
    }

    reason: Optional[DashboardError] = None
    if client.is_configured:
        try:
            history = client.get_history(point.latitude, point.longitude, days, now=now)
        except UpstreamUnavailable as e:
            logger.warning(f"Historical weather falling back to synthetic data: {e.message}")
            reason = e
        else:
            if history:
                data["days"] = [d.to_dict() for d in history]
                return ok(data, source=client.SOURCE)
            logger.warning("OpenWeatherMap returned no observations, using synthetic data")

    series = generate_historical_weather(
        days,
        settings.synthetic_base_temperature_c,
        settings.synthetic_base_humidity_pct,
        rng,
        today=now.date(),
        legacy_seasonal=settings.weather_legacy_seasonal,
    )
    data["days"] = [d.to_dict() for d in series]
    data["note"] = "Simulated values; configure OPENWEATHER_API_KEY for measured history"
    return degraded(data, reason, source=SIMULATED_SOURCE)


@app.get("/api/v1/weather/current", response_model=Envelope, tags=["Weather"])
async def current_weather(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    timezone: str = Query(default="auto"),
    client: OpenMeteoClient = Depends(deps.get_open_meteo_client),
):
    """Current conditions and today's aggregates from Open-Meteo."""
    report = await client.get_current(lat, lng, tz=timezone)
    return ok(report.to_dict(), source="Open-Meteo")


@app.get("/api/v1/weather/history", response_model=Envelope, tags=["Weather"])
async def weather_history(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    days: int = Query(default=7, ge=1, le=16),
    timezone: str = Query(default="auto"),
    client: OpenMeteoClient = Depends(deps.get_open_meteo_client),
):
    """Hourly weather and air quality for the past `days` days."""
    report = await client.get_history(lat, lng, days=days, tz=timezone)
    return ok(report.to_dict(), source="Open-Meteo")


@app.get("/api/v1/weather/forecast", response_model=Envelope, tags=["Weather"])
def weather_forecast(
    response: Response,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    client: NOAAClient = Depends(deps.get_noaa_client),
):
    """National Weather Service forecast (US locations only)."""
    forecast = client.get_forecast(lat, lng)
    _cache(response, 1800, 3600)
    return ok(forecast, source=client.SOURCE)


# ============================================================================
# Air Quality
# ============================================================================

@app.get("/api/v1/air-quality", response_model=Envelope, tags=["Air Quality"])
def air_quality(
    response: Response,
    location: str = Query(default="here"),
    coords: Optional[str] = Query(default=None, description="lat,lng"),
    client: WAQIClient = Depends(deps.get_waqi_client),
):
    """Station AQI reading; a sample reading is served if WAQI is unavailable."""
    if coords:
        parse_coords(coords)

    try:
        reading = client.get_reading(location=location, coords=coords)
    except UpstreamUnavailable as e:
        logger.warning(f"Air quality falling back to sample data: {e.message}")
        _cache(response, 300)
        return degraded(fallback_reading().to_dict(), e, source="Sample data")

    _cache(response, 900, 1800)
    if reading.is_fallback:
        return degraded(reading.to_dict(), source=client.SOURCE)
    return ok(reading.to_dict(), source=client.SOURCE)


# ============================================================================
# Satellite Imagery and Granules
# ============================================================================

@app.get("/api/v1/satellite-scenes", response_model=Envelope, tags=["Satellite"])
def satellite_scenes(
    response: Response,
    bbox: str = Query(default="-74.1,40.7,-73.9,40.8", description="minx,miny,maxx,maxy"),
    limit: int = Query(default=5, ge=1, le=100),
    day: Optional[date] = Query(default=None, alias="datetime"),
    client: LandsatClient = Depends(deps.get_landsat_client),
    now: datetime = Depends(deps.get_now),
):
    """Landsat scenes acquired on one day; an empty collection if STAC fails."""
    box = parse_bbox(bbox)
    try:
        result = client.search(box, day or now.date(), limit=limit)
    except UpstreamUnavailable as e:
        logger.warning(f"Landsat search falling back to empty collection: {e.message}")
        return degraded(empty_search_result().to_dict(), e, source=client.SOURCE)

    _cache(response, 3600, 7200)
    return ok(result.to_dict(), source=client.SOURCE)


def _default_temporal(now: datetime, days: int) -> str:
    end = now.date()
    return f"{(end - timedelta(days=days)).isoformat()},{end.isoformat()}"


@app.get("/api/v1/granules", response_model=Envelope, tags=["Satellite"])
def granules(
    response: Response,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    data_type: str = Query(default="temperature", alias="type"),
    temporal: Optional[str] = Query(default=None, description="start,end ISO dates"),
    client: CMRClient = Depends(deps.get_cmr_client),
    now: datetime = Depends(deps.get_now),
):
    """MODIS granule metadata around a point (last 30 days by default)."""
    result = client.search_granules(lat, lng, data_type=data_type, temporal=temporal or _default_temporal(now, 30))
    _cache(response, 3600, 7200)
    return ok(result.to_dict(), source=client.SOURCE)


@app.get("/api/v1/granule-temperature", response_model=Envelope, tags=["Satellite"])
def granule_temperature(
    response: Response,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    temporal: Optional[str] = Query(default=None, description="start,end ISO dates"),
    limit: int = Query(default=7, ge=1, le=20),
    client: CMRClient = Depends(deps.get_cmr_client),
    rng: RandomSource = Depends(deps.get_random_source),
    now: datetime = Depends(deps.get_now),
):
    """
    Estimated land surface temperature per MODIS granule.

    The granule list is real CMR metadata; the temperatures are heuristic
    and always flagged synthetic.
    """
    result = client.search_granules(
        lat, lng, data_type="temperature", temporal=temporal or _default_temporal(now, 7), page_size=limit
    )
    if not result.granules:
        raise NotFound("No MODIS temperature granules found for this location and time range")

    estimates = [
        estimate_temperature_from_granule(granule, lat, lng, rng)
        for granule in result.granules[:limit]
    ]
    temperatures = [e.final_temperature_c for e in estimates]

    _cache(response, 1800, 3600)
    return degraded(
        {
            "location": {"lat": lat, "lng": lng},
            "temperatures": [e.to_dict() for e in estimates],
            "summary": {
                "count": len(estimates),
                "average_temperature_c": round(sum(temperatures) / len(temperatures), 2),
                "min_temperature_c": min(temperatures),
                "max_temperature_c": max(temperatures),
                "average_cloud_cover": result.average_cloud_cover,
            },
            "note": "Estimated from granule metadata, not from radiance data",
        },
        source=f"{client.SOURCE} metadata + synthetic model",
    )


@app.post("/api/v1/appeears/area", response_model=Envelope, tags=["Satellite"])
def appeears_area(
    body: AppEEARSRequest,
    client: AppEEARSClient = Depends(deps.get_appeears_client),
):
    """
    AppEEARS products and the GeoJSON area to request them for.

    Named products are filtered from the catalogue; without names the first
    ten are listed. Sample MODIS products are served if the catalogue fails.
    """
    if not body.token:
        raise MissingCredentials("NASA token required")

    bounds = GeoBounds(**body.bounds.model_dump())
    temporal = None
    if body.temporal:
        start, end = parse_date_range(body.temporal)
        temporal = {"start": start.isoformat(), "end": end.isoformat()}

    reason: Optional[DashboardError] = None
    try:
        available = client.list_products()
    except UpstreamUnavailable as e:
        logger.warning(f"AppEEARS falling back to sample products: {e.message}")
        available = fallback_products()
        reason = e

    selected = select_products(available, body.products)
    data = {
        "products": [p.to_dict() for p in selected],
        "geojson": bounds.to_geojson(),
        "bounds": bounds.to_dict(),
        "temporal": temporal,
        "available_products": len(available),
        "requested_products": len(selected),
    }
    if reason is not None:
        return degraded(data, reason, source="Sample data")
    return ok(data, source=client.SOURCE)


# ============================================================================
# Population and Geocoding
# ============================================================================

def _lookup_population(query: PopulationRequest, client: GeoDBClient) -> Envelope:
    if query.city:
        lookup = client.lookup_city(query.city)
        if lookup.match is None:
            raise NotFound(
                f"City '{query.city}' not found",
                details={"suggestions": lookup.suggestions},
            )
        data = lookup.match.to_dict()
        data["suggestions"] = lookup.suggestions
        return ok(data, source=client.SOURCE)

    if query.lat is not None and query.lng is not None:
        summary = client.nearest_place(query.lat, query.lng)
        return ok(summary.to_dict(), source=client.SOURCE)

    raise ValidationError("Provide either lat and lng, or city")


@app.get("/api/v1/population", response_model=Envelope, tags=["Population"])
def population(
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lng: Optional[float] = Query(default=None, ge=-180, le=180),
    city: Optional[str] = Query(default=None),
    client: GeoDBClient = Depends(deps.get_geodb_client),
):
    """Population of a city, or of the place nearest to a point."""
    return _lookup_population(PopulationRequest(lat=lat, lng=lng, city=city), client)


@app.post("/api/v1/population", response_model=Envelope, tags=["Population"])
def population_post(
    body: PopulationRequest,
    client: GeoDBClient = Depends(deps.get_geodb_client),
):
    """Same lookup as the GET form with a JSON body."""
    return _lookup_population(body, client)


@app.get("/api/v1/population/country/{iso3}", response_model=Envelope, tags=["Population"])
def country_population(
    iso3: str,
    response: Response,
    client: WorldPopClient = Depends(deps.get_worldpop_client),
):
    """Latest WorldPop dataset for a country; sample figures if WorldPop fails."""
    if len(iso3) != 3 or not iso3.isalpha():
        raise ValidationError(f"Invalid ISO3 country code '{iso3}'")

    try:
        country = client.get_country(iso3)
    except UpstreamUnavailable as e:
        logger.warning(f"WorldPop falling back to sample data: {e.message}")
        _cache(response, 300)
        return degraded(dict(POPULATION_FALLBACK, country=iso3.upper()), e, source="Sample data")

    _cache(response, 86400, 172800)
    return ok(country.to_dict(), source=client.SOURCE)


@app.get("/api/v1/cities/suggest", response_model=Envelope, tags=["Population"])
def city_suggestions(
    q: str = Query(default=""),
    limit: int = Query(default=5, ge=1, le=20),
    client: NominatimClient = Depends(deps.get_nominatim_client),
):
    """Autocomplete suggestions; an empty list when the geocoder fails."""
    try:
        suggestions = client.suggest(q, limit=limit)
    except UpstreamUnavailable as e:
        logger.warning(f"City suggestions unavailable: {e.message}")
        return degraded([], e, source=client.SOURCE)
    return ok([s.to_dict() for s in suggestions], source=client.SOURCE)


# ============================================================================
# Map Tiles
# ============================================================================

@app.get("/api/v1/gibs/layers", response_model=Envelope, tags=["Tiles"])
async def gibs_layers():
    """Available NASA GIBS overlay layers."""
    return ok(list_gibs_layers(), source="NASA GIBS")


@app.get("/api/v1/gibs/tile", response_model=Envelope, tags=["Tiles"])
async def gibs_tile(
    layer: str,
    z: int = Query(..., ge=0, le=GIBS_MAX_ZOOM),
    x: int = Query(..., ge=0),
    y: int = Query(..., ge=0),
    time: Optional[date] = Query(default=None),
    now: datetime = Depends(deps.get_now),
):
    """Tile URL for a GIBS layer on a given day."""
    url = build_gibs_tile_url(layer, z, x, y, time or now.date())
    return ok({"layer": layer, "url": url, "z": z, "x": x, "y": y}, source="NASA GIBS")


@app.get("/api/v1/tiles/wmts", tags=["Tiles"])
def wmts_tile(
    request: Request,
    client: WMTSProxyClient = Depends(deps.get_wmts_client),
):
    """Binary passthrough of a WMTS GetTile request."""
    params = {key.lower(): value for key, value in request.query_params.items()}
    tile = client.fetch_tile(params)
    return Response(
        content=tile.content,
        media_type=tile.media_type,
        headers={"Cache-Control": "public, max-age=3600"},
    )


# ============================================================================
# Run with: uvicorn earthdash.api.main:app --reload
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
