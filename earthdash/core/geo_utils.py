"""
EarthDash - Geospatial Utilities
Common geospatial calculations and parameter parsing.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

from earthdash.core.errors import ValidationError

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Point:
    """Geographic point with latitude and longitude."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeoBounds:
    """
    Geographic bounding box in WGS84 degrees.

    Ordering is not validated: a box with west > east (crossing the
    antimeridian) or south > north contains no points.
    """
    north: float
    south: float
    east: float
    west: float

    def contains(self, latitude: float, longitude: float) -> bool:
        """Inclusive containment test. NaN coordinates are never contained."""
        return (
            self.south <= latitude <= self.north and
            self.west <= longitude <= self.east
        )

    def to_dict(self) -> dict:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }

    def to_geojson(self) -> dict:
        """Single-polygon FeatureCollection with a closed counter-clockwise ring."""
        ring = [
            [self.west, self.south],
            [self.east, self.south],
            [self.east, self.north],
            [self.west, self.north],
            [self.west, self.south],
        ]
        return {
            "type": "FeatureCollection",
            "features": [{
                "type": "Feature",
                "geometry": {"type": "Polygon", "coordinates": [ring]},
                "properties": {},
            }],
        }


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1, lon1: First point coordinates in decimal degrees
        lat2, lon2: Second point coordinates in decimal degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def degree_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """Euclidean distance in degree space (no projection)."""
    return math.sqrt((lat1 - lat2) ** 2 + (lon1 - lon2) ** 2)


def bbox_around_point(
    latitude: float,
    longitude: float,
    buffer_degrees: float = 0.1
) -> Tuple[float, float, float, float]:
    """Square box (west, south, east, north) centered on a point."""
    return (
        longitude - buffer_degrees,
        latitude - buffer_degrees,
        longitude + buffer_degrees,
        latitude + buffer_degrees,
    )


def parse_coords(value: str) -> Point:
    """
    Parse a "lat,lng" query string.

    Raises:
        ValidationError: if the value is not two finite numbers in range
    """
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 2:
        raise ValidationError(f"Invalid coords '{value}'. Expected: lat,lng")
    try:
        latitude, longitude = float(parts[0]), float(parts[1])
    except ValueError:
        raise ValidationError(f"Invalid coords '{value}'. Expected: lat,lng")

    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise ValidationError(f"Invalid coords '{value}'. Expected finite numbers")
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        raise ValidationError(f"Coordinates out of range: {latitude},{longitude}")

    return Point(latitude=latitude, longitude=longitude)


def parse_bbox(value: str) -> List[float]:
    """
    Parse a "minx,miny,maxx,maxy" query string.

    Raises:
        ValidationError: if the value is not four numbers
    """
    try:
        numbers = [float(p) for p in value.split(",")]
    except ValueError:
        numbers = []

    if len(numbers) != 4 or any(math.isnan(n) for n in numbers):
        raise ValidationError("Invalid bbox format. Expected: minx,miny,maxx,maxy")

    return numbers
