"""
EarthDash - Population Clients

- GeoDB Cities GraphQL API: city lookup by name (with fuzzy matching and
  suggestions) and nearest populated place for a coordinate
- WorldPop REST catalogue: per-country gridded population datasets

GeoDB docs: http://geodb-cities-api.wirefreethought.com/docs/api
WorldPop docs: https://www.worldpop.org/sdi/introapi/
"""

import logging
import math
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from earthdash.core.config import settings
from earthdash.core.constants import (
    CITY_AREA_KM2,
    COUNTRY_BOXES,
    COUNTRY_DENSITIES,
    DEFAULT_COUNTRY_CODE,
    DEFAULT_COUNTRY_DENSITY,
    GEODB_MIN_POPULATION,
)
from earthdash.core.errors import NotFound, UpstreamUnavailable
from earthdash.core.geo_utils import haversine_distance
from earthdash.ingestion.http import UpstreamClient

logger = logging.getLogger(__name__)

PLACE_FIELDS = """
    id
    name
    population
    latitude
    longitude
    country { name code }
    region { name }
    elevationMeters
"""

SEARCH_QUERY = """
query SearchCity($cityName: String!) {
  populatedPlaces(namePrefix: $cityName, minPopulation: %d, first: 10) {
    totalCount
    edges { node { %s } }
  }
}
""" % (GEODB_MIN_POPULATION, PLACE_FIELDS)

COUNTRY_QUERY = """
query GetPlacesInCountry($countryCode: String!) {
  country(id: $countryCode) {
    name
    populatedPlaces(first: 10, minPopulation: %d) {
      totalCount
      edges { node { %s } }
    }
  }
}
""" % (GEODB_MIN_POPULATION, PLACE_FIELDS)

# Matches above this similarity are accepted as the requested city
FUZZY_MATCH_THRESHOLD = 0.2
MAJOR_CITY_POPULATION = 1_000_000


@dataclass
class Place:
    """A populated place returned by GeoDB."""
    id: str
    name: str
    population: int
    latitude: float
    longitude: float
    country: str
    country_code: str
    region: str
    elevation: Optional[float] = None

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "Place":
        country = node.get("country") or {}
        region = node.get("region") or {}
        return cls(
            id=str(node.get("id", "")),
            name=node.get("name", ""),
            population=int(node.get("population") or 0),
            latitude=float(node.get("latitude") or 0),
            longitude=float(node.get("longitude") or 0),
            country=country.get("name", ""),
            country_code=country.get("code", ""),
            region=region.get("name", ""),
            elevation=node.get("elevationMeters"),
        )

    def suggestion(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "population": self.population,
            "country": self.country,
            "region": self.region,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass
class PopulationSummary:
    """Population figures for a city or the nearest place to a point."""
    city: str
    country: str
    region: str
    population: int
    density: int
    latitude: float
    longitude: float
    elevation: Optional[float] = None

    @classmethod
    def from_place(cls, place: Place, area_km2: float = CITY_AREA_KM2) -> "PopulationSummary":
        return cls(
            city=place.name,
            country=place.country,
            region=place.region,
            population=place.population,
            density=max(1, round(place.population / area_km2)),
            latitude=place.latitude,
            longitude=place.longitude,
            elevation=place.elevation,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CityLookup:
    """Outcome of a name search: a match, suggestions, or both."""
    query: str
    match: Optional[PopulationSummary] = None
    suggestions: List[Dict[str, Any]] = field(default_factory=list)


def normalize_city_name(name: str) -> str:
    """Lowercase, strip punctuation and administrative words."""
    cleaned = name.strip().lower()
    cleaned = re.sub(r"[^\w\s]", "", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    cleaned = re.sub(r"^(city of|town of|village of)\s+", "", cleaned)
    cleaned = re.sub(r"\s+(city|town|village)$", "", cleaned)
    cleaned = re.sub(r"\b(district|city|town|municipality)\b", "", cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


def search_terms(name: str) -> List[str]:
    """Candidate prefixes to try against GeoDB, most specific first."""
    cleaned = normalize_city_name(name)
    candidates = [
        name.strip(),
        cleaned,
        re.sub(r"^(city of|town of|village of)\s+", "", name, flags=re.IGNORECASE).strip(),
        re.sub(r"\s+(city|town|village)$", "", name, flags=re.IGNORECASE).strip(),
        cleaned.split(" ")[0] if cleaned else "",
        cleaned.replace(" ", ""),
    ]
    terms = []
    for term in candidates:
        if len(term) >= 2 and term not in terms:
            terms.append(term)
    return terms


def levenshtein_distance(a: str, b: str) -> int:
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(min(
                current[j - 1] + 1,
                previous[j] + 1,
                previous[j - 1] + (char_a != char_b),
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """1.0 for identical strings, falling with edit distance."""
    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    if not longer:
        return 1.0
    return (len(longer) - levenshtein_distance(longer, shorter)) / len(longer)


def pick_best_place(query: str, places: List[Place]) -> Optional[Place]:
    """
    Choose the place a user most likely meant.

    Order: exact name, then a major city containing the query, then the
    closest fuzzy match above the threshold.
    """
    target = normalize_city_name(query)
    for place in places:
        if place.name.lower() == target:
            return place

    for place in places:
        if target in place.name.lower() and place.population > MAJOR_CITY_POPULATION:
            return place

    scored = sorted(places, key=lambda p: similarity(target, p.name.lower()), reverse=True)
    if scored and similarity(target, scored[0].name.lower()) > FUZZY_MATCH_THRESHOLD:
        return scored[0]
    return None


def detect_country_code(latitude: float, longitude: float) -> str:
    """Coarse ISO alpha-2 guess from fixed country boxes."""
    for code, west, south, east, north in COUNTRY_BOXES:
        if south <= latitude <= north and west <= longitude <= east:
            return code
    return DEFAULT_COUNTRY_CODE


class GeoDBClient(UpstreamClient):
    """Client for the GeoDB Cities free GraphQL service."""

    SOURCE = "GeoDB Cities"

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport)
        self.url = settings.geodb_graphql_url

    def _query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        result = self._post_json(self.url, {"query": query, "variables": variables})
        data = result.get("data") or {}
        errors = result.get("errors")
        if errors and not data:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else None
            raise UpstreamUnavailable(self.SOURCE, str(message or "GraphQL error"))
        if not isinstance(data, dict):
            raise UpstreamUnavailable(self.SOURCE, "GraphQL response has no data object")
        return data

    def search_places(self, prefix: str) -> List[Place]:
        data = self._query(SEARCH_QUERY, {"cityName": prefix})
        edges = (data.get("populatedPlaces") or {}).get("edges") or []
        return [Place.from_node(edge["node"]) for edge in edges if edge.get("node")]

    def lookup_city(self, name: str) -> CityLookup:
        """
        Find population data for a city name.

        Each search term is tried in turn until one returns places. Failed
        attempts are skipped; if every attempt failed the last error is raised.

        Raises:
            UpstreamUnavailable: when no search attempt reached GeoDB
        """
        places: List[Place] = []
        last_error: Optional[UpstreamUnavailable] = None
        reached = False

        for term in search_terms(name):
            try:
                places = self.search_places(term)
            except UpstreamUnavailable as e:
                logger.warning(f"GeoDB search failed for term {term!r}: {e}")
                last_error = e
                continue
            reached = True
            if places:
                logger.info(f"Found {len(places)} places for search term {term!r}")
                break

        if not places:
            if not reached and last_error is not None:
                raise last_error
            return CityLookup(query=name)

        best = pick_best_place(name, places)
        suggestions = [p.suggestion() for p in places[:5]]
        if best is None:
            return CityLookup(query=name, suggestions=suggestions)
        return CityLookup(query=name, match=PopulationSummary.from_place(best), suggestions=suggestions)

    def nearest_place(self, latitude: float, longitude: float, radius_km: float = 50.0) -> PopulationSummary:
        """
        Population of the closest indexed place to a point.

        GeoDB's free tier has no proximity search, so places are listed for
        the detected country and ranked by great-circle distance.

        Raises:
            NotFound: if the country has no populated places
        """
        country_code = detect_country_code(latitude, longitude)
        data = self._query(COUNTRY_QUERY, {"countryCode": country_code})
        edges = ((data.get("country") or {}).get("populatedPlaces") or {}).get("edges") or []
        places = [Place.from_node(e["node"]) for e in edges if e.get("node")]
        places = [p for p in places if p.population > 0]
        if not places:
            raise NotFound(f"No population data found for country {country_code}")

        closest = min(places, key=lambda p: haversine_distance(latitude, longitude, p.latitude, p.longitude))
        return PopulationSummary.from_place(closest, area_km2=math.pi * radius_km ** 2)


@dataclass
class CountryPopulation:
    """Latest WorldPop dataset for a country."""
    country: str
    latest_year: Optional[int]
    density: int
    dataset: Dict[str, Any]
    historical: List[Dict[str, Any]]
    year_range: Dict[str, Optional[int]]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _year(item: Dict[str, Any]) -> Optional[int]:
    try:
        return int(item.get("popyear"))
    except (TypeError, ValueError):
        return None


class WorldPopClient(UpstreamClient):
    """Client for the WorldPop dataset catalogue (no key required)."""

    SOURCE = "WorldPop"

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        super().__init__(timeout=timeout, transport=transport, headers={"Accept": "application/json"})
        self.url = settings.worldpop_api_url

    def get_country(self, iso3: str) -> CountryPopulation:
        """
        Summarize the WorldPop constrained-grid datasets for a country.

        Args:
            iso3: ISO 3166-1 alpha-3 code (e.g., "USA")
        """
        iso3 = iso3.upper()
        data = self._get_json(self.url, params={"iso3": iso3})
        items = [
            item for item in data.get("data") or []
            if isinstance(item, dict) and _year(item) is not None
        ]
        if not items:
            raise UpstreamUnavailable(self.SOURCE, f"no datasets listed for {iso3}")

        items.sort(key=_year)
        latest = items[-1]
        return CountryPopulation(
            country=iso3,
            latest_year=_year(latest),
            density=COUNTRY_DENSITIES.get(iso3, DEFAULT_COUNTRY_DENSITY),
            dataset={
                "title": latest.get("title", "Population Data"),
                "description": latest.get("desc", ""),
                "year": _year(latest),
                "data_file": latest.get("data_file", ""),
                "image_url": latest.get("url_img", ""),
                "continent": latest.get("continent", ""),
                "country": latest.get("country", ""),
                "resolution": "100m",
                "format": "GeoTIFF",
                "citation": latest.get("citation", ""),
                "license": latest.get("license", ""),
            },
            historical=[
                {
                    "year": _year(item),
                    "title": item.get("title"),
                    "data_file": item.get("data_file"),
                    "image_url": item.get("url_img"),
                    "date": item.get("date"),
                }
                for item in items
            ],
            year_range={"start": _year(items[0]), "end": _year(latest)},
        )
