"""
EarthDash - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Any, Dict, List, Tuple

# =============================================================================
# FIRE DETECTION FEEDS
# =============================================================================

# Global MODIS Collection 6.1 active fire feeds, keyed by window length in days
FIRMS_GLOBAL_FEEDS: Dict[int, str] = {
    1: "MODIS_C6_1_Global_24h.csv",
    2: "MODIS_C6_1_Global_48h.csv",
    7: "MODIS_C6_1_Global_7d.csv",
}

# Rows shorter than this are dropped by the ingestion filter
FIRMS_MIN_COLUMNS: int = 12

# =============================================================================
# URBAN HEAT ISLAND REFERENCE CITIES
# =============================================================================

# (name, latitude, longitude, radius in degrees)
URBAN_AREAS: List[Tuple[str, float, float, float]] = [
    ("New York", 40.7128, -74.0060, 0.5),
    ("Los Angeles", 34.0522, -118.2437, 0.5),
    ("Chicago", 41.8781, -87.6298, 0.5),
    ("Houston", 29.7604, -95.3698, 0.5),
    ("Phoenix", 33.4484, -112.0740, 0.5),
]

# =============================================================================
# NASA CMR / MODIS PRODUCTS
# =============================================================================

MODIS_PRODUCTS: Dict[str, Dict[str, str]] = {
    "temperature": {
        "product": "MOD11A1",
        "collection_id": "C1748058432-LPCLOUD",
        "description": "Land Surface Temperature",
    },
    "vegetation": {
        "product": "MCD43A4",
        "collection_id": "C2218719731-LPCLOUD",
        "description": "Vegetation Index (NDVI)",
    },
    "fire": {
        "product": "MOD14",
        "collection_id": "C2271754179-LPCLOUD",
        "description": "Fire Detection",
    },
    "albedo": {
        "product": "MCD43A3",
        "collection_id": "C2278860820-LPCLOUD",
        "description": "Surface Albedo",
    },
    "reflectance": {
        "product": "MOD09GQ",
        "collection_id": "C2343115666-LPCLOUD",
        "description": "Surface Reflectance",
    },
}

# CMR link relations
CMR_DATA_REL = "http://esipfed.org/ns/fedsearch/1.1/data#"
CMR_SERVICE_REL = "http://esipfed.org/ns/fedsearch/1.1/service#"
CMR_BROWSE_REL = "http://esipfed.org/ns/fedsearch/1.1/browse#"

# =============================================================================
# GIBS IMAGERY LAYERS
# =============================================================================

GIBS_TILE_TEMPLATE = (
    "https://gibs.earthdata.nasa.gov/wmts/epsg4326/best/"
    "{product}/default/{time}/250m/{z}/{y}/{x}.png"
)

# id -> (GIBS product, display name, description)
GIBS_LAYERS: Dict[str, Tuple[str, str, str]] = {
    "modis_terra_truecolor": (
        "MODIS_Terra_CorrectedReflectance_TrueColor",
        "MODIS Terra True Color",
        "MODIS Terra Corrected Reflectance True Color",
    ),
    "modis_aqua_truecolor": (
        "MODIS_Aqua_CorrectedReflectance_TrueColor",
        "MODIS Aqua True Color",
        "MODIS Aqua Corrected Reflectance True Color",
    ),
    "viirs_truecolor": (
        "VIIRS_SNPP_CorrectedReflectance_TrueColor",
        "VIIRS True Color",
        "VIIRS SNPP Corrected Reflectance True Color",
    ),
    "landsat_truecolor": (
        "Landsat_WELD_CorrectedReflectance_TrueColor",
        "Landsat True Color",
        "Landsat WELD Corrected Reflectance True Color",
    ),
    "modis_terra_lst": (
        "MODIS_Terra_Land_Surface_Temperature_Day",
        "MODIS Land Surface Temperature",
        "MODIS Terra Land Surface Temperature Day",
    ),
    "modis_aqua_lst": (
        "MODIS_Aqua_Land_Surface_Temperature_Day",
        "MODIS Aqua Land Surface Temperature",
        "MODIS Aqua Land Surface Temperature Day",
    ),
    "modis_ndvi": (
        "MODIS_Terra_NDVI",
        "MODIS NDVI",
        "MODIS Terra Vegetation Indices NDVI",
    ),
    "modis_evi": (
        "MODIS_Terra_EVI",
        "MODIS EVI",
        "MODIS Terra Vegetation Indices EVI",
    ),
}

GIBS_MAX_ZOOM: int = 8

WMTS_REQUIRED_PARAMS: List[str] = [
    "service",
    "request",
    "version",
    "layer",
    "style",
    "tilematrixset",
    "tilematrix",
    "tilerow",
    "tilecol",
    "format",
]

# =============================================================================
# POPULATION REFERENCE DATA
# =============================================================================

# People per km², rough national averages
COUNTRY_DENSITIES: Dict[str, int] = {
    "USA": 36,
    "CHN": 148,
    "IND": 464,
    "BRA": 25,
    "DEU": 233,
    "GBR": 275,
    "FRA": 119,
    "JPN": 347,
    "CAN": 4,
    "AUS": 3,
}

DEFAULT_COUNTRY_DENSITY: int = 50

# Coarse country detection (ISO alpha-2, west, south, east, north), first match wins
COUNTRY_BOXES: List[Tuple[str, float, float, float, float]] = [
    ("IN", 68.0, 6.0, 97.0, 37.0),
    ("US", -125.0, 24.0, -66.0, 49.0),
    ("CN", 73.0, 18.0, 135.0, 54.0),
    ("BR", -74.0, -34.0, -34.0, 5.0),
    ("RU", 19.0, 41.0, 169.0, 82.0),
    ("CA", -141.0, 41.0, -52.0, 84.0),
    ("AU", 113.0, -44.0, 154.0, -10.0),
    ("GB", -8.0, 50.0, 2.0, 59.0),
    ("DE", 5.0, 47.0, 15.0, 55.0),
    ("FR", -5.0, 42.0, 8.0, 51.0),
]

DEFAULT_COUNTRY_CODE: str = "IN"

# GeoDB free tier only indexes places above this size
GEODB_MIN_POPULATION: int = 40000

# Assumed urban footprint used for city density estimates
CITY_AREA_KM2: float = 100.0

# =============================================================================
# STATIC FALLBACK SAMPLES
# =============================================================================

AIR_QUALITY_FALLBACK_AQI: int = 45

AIR_QUALITY_FALLBACK_POLLUTANTS: Dict[str, float] = {
    "pm25": 12.5,
    "pm10": 18.3,
    "no2": 25.7,
    "o3": 45.2,
    "so2": 8.9,
    "co": 1.2,
}

POPULATION_FALLBACK: Dict[str, float] = {
    "population": 8500000,
    "density": 2850,
    "growth_rate": 0.8,
    "year": 2023,
}

# Served when the AppEEARS product catalogue is unreachable
APPEEARS_FALLBACK_PRODUCTS: List[Dict[str, Any]] = [
    {
        "Product": "MOD11A1",
        "Platform": "Terra MODIS",
        "Description": "Land Surface Temperature and Emissivity",
        "RasterType": "Tile",
        "Resolution": "1000m",
        "TemporalGranularity": "Daily",
        "Version": "061",
        "Available": True,
        "DocLink": "https://doi.org/10.5067/MODIS/MOD11A1.061",
        "Source": "LP DAAC",
        "TemporalExtentStart": "2000-02-18",
        "TemporalExtentEnd": "Present",
        "Deleted": False,
        "DOI": "10.5067/MODIS/MOD11A1.061",
        "ProductAndVersion": "MOD11A1.061",
    },
    {
        "Product": "MOD13Q1",
        "Platform": "Terra MODIS",
        "Description": "Vegetation Indices 16-Day L3 Global 250m",
        "RasterType": "Tile",
        "Resolution": "250m",
        "TemporalGranularity": "16 day",
        "Version": "061",
        "Available": True,
        "DocLink": "https://doi.org/10.5067/MODIS/MOD13Q1.061",
        "Source": "LP DAAC",
        "TemporalExtentStart": "2000-02-18",
        "TemporalExtentEnd": "Present",
        "Deleted": False,
        "DOI": "10.5067/MODIS/MOD13Q1.061",
        "ProductAndVersion": "MOD13Q1.061",
    },
]

# Products returned when a request names none
APPEEARS_DEFAULT_PRODUCT_COUNT: int = 10

# =============================================================================
# SYNTHETIC MODEL BOUNDS
# =============================================================================

MIN_SURFACE_TEMPERATURE_C: float = -50.0
MAX_SURFACE_TEMPERATURE_C: float = 60.0

# =============================================================================
# DASHBOARD INDICATORS
# =============================================================================

# US EPA AQI bands: (upper bound, status, color, health advice)
AQI_LEVELS: List[Tuple[float, str, str, str]] = [
    (50, "Good", "green", "Low risk - Air quality is satisfactory"),
    (100, "Moderate", "yellow", "Moderate risk - Sensitive people may experience minor issues"),
    (150, "Unhealthy for Sensitive Groups", "orange", "High risk - Sensitive groups should limit outdoor activity"),
    (200, "Unhealthy", "red", "Very high risk - Everyone should limit outdoor activity"),
    (300, "Very Unhealthy", "purple", "Extreme risk - Avoid outdoor activity"),
]
AQI_HAZARDOUS: Tuple[str, str, str] = ("Hazardous", "maroon", "Dangerous - Stay indoors")

# Rural reference temperature for heat island intensity
UHI_BASELINE_TEMPERATURE_C: float = 20.0
# Most comfortable outdoor temperature for the environmental health score
COMFORT_TEMPERATURE_C: float = 22.0
# Air quality score when no AQI is available
NO_READING_AIR_SCORE: float = 85.0
# Component score used when an input is missing
NEUTRAL_COMPONENT_SCORE: float = 50.0
