"""Geocoding service protocol, mock and Nominatim implementations."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Iterable, Protocol

import httpx

from middlehousing.core.config import GeocodingConfig
from middlehousing.core.types import ClassificationResult, GeocodedLocation
from middlehousing.gis.models import MapPoint
from middlehousing.ingest.headers import ColumnMapping, extract_permit_text, resolve_columns

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    """Protocol for address-to-coordinate lookup services."""

    async def geocode(self, address: str) -> GeocodedLocation | None: ...


class MockGeocoder:
    """Mock geocoder with fixture Seattle addresses for development/testing."""

    def __init__(self, locations: dict[str, GeocodedLocation] | None = None) -> None:
        self._locations: dict[str, GeocodedLocation] = {}
        if locations is None:
            self._load_fixtures()
        else:
            for address, location in locations.items():
                self._locations[address.lower()] = location

    def _load_fixtures(self) -> None:
        fixtures = {
            "123 Main St, Seattle, WA": GeocodedLocation(lat=47.5990, lng=-122.3280),
            "4500 Fremont Ave N, Seattle, WA": GeocodedLocation(lat=47.6620, lng=-122.3500),
            "2300 NW Market St, Seattle, WA": GeocodedLocation(lat=47.6687, lng=-122.3870),
            "5200 Rainier Ave S, Seattle, WA": GeocodedLocation(lat=47.5560, lng=-122.2840),
            "8000 Greenwood Ave N, Seattle, WA": GeocodedLocation(lat=47.6870, lng=-122.3550),
        }
        for address, location in fixtures.items():
            self._locations[address.lower()] = location

    async def geocode(self, address: str) -> GeocodedLocation | None:
        key = address.strip().lower()
        if not key:
            return None
        location = self._locations.get(key)
        if location:
            return location
        # Partial match fallback
        for known, loc in self._locations.items():
            if key in known or known in key:
                return loc
        return None


class NominatimGeocoder:
    """Looks up addresses against a Nominatim-compatible search API.

    The most recent ``config.cache_size`` lookups are cached per address.
    Any HTTP error or unusable payload is logged and reported as "not
    found" so one bad address never affects the rest of a dataset.
    """

    def __init__(self, config: GeocodingConfig) -> None:
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers={"User-Agent": config.user_agent},
        )
        self._cache: OrderedDict[str, GeocodedLocation | None] = OrderedDict()

    def _query(self, address: str) -> str:
        suffix = self.config.city_suffix
        if suffix and suffix.split(",")[0].strip().lower() not in address.lower():
            return f"{address}, {suffix}"
        return address

    async def geocode(self, address: str) -> GeocodedLocation | None:
        address = address.strip()
        if not address:
            return None
        if address in self._cache:
            self._cache.move_to_end(address)
            return self._cache[address]

        location = await self._lookup(self._query(address))
        self._remember(address, location)
        return location

    def _remember(self, address: str, location: GeocodedLocation | None) -> None:
        if self.config.cache_size <= 0:
            return
        self._cache[address] = location
        while len(self._cache) > self.config.cache_size:
            self._cache.popitem(last=False)

    async def _lookup(self, query: str) -> GeocodedLocation | None:
        try:
            resp = await self._http.get(
                "/search",
                params={"q": query, "format": "json", "limit": 1},
            )
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Geocoding failed for %r: %s", query, exc)
            return None

        if not payload:
            logger.info("No geocoding match for %r", query)
            return None
        try:
            first = payload[0]
            return GeocodedLocation(lat=float(first["lat"]), lng=float(first["lon"]))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning("Unexpected geocoding payload for %r: %s", query, exc)
            return None

    async def close(self) -> None:
        await self._http.aclose()


def create_geocoder(config: GeocodingConfig) -> Geocoder:
    """Build the geocoder named by ``config.provider``."""
    provider = config.provider.lower()
    if provider == "mock":
        return MockGeocoder()
    if provider == "nominatim":
        return NominatimGeocoder(config)
    raise ValueError(f"Unknown geocoding provider: {config.provider!r}")


async def geocode_results(
    results: Iterable[ClassificationResult],
    geocoder: Geocoder,
    columns: ColumnMapping | None = None,
    concurrency: int = 4,
    middle_housing_only: bool = True,
) -> list[MapPoint]:
    """Position classified permits for the map view.

    Records without an address are skipped. Failed lookups yield a point
    with ``location=None``.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _locate(result: ClassificationResult, address: str) -> MapPoint:
        async with semaphore:
            try:
                location = await geocoder.geocode(address)
            except Exception as exc:
                logger.warning("Geocoder raised for %r: %s", address, exc)
                location = None
        return MapPoint(address=address, result=result, location=location)

    tasks = []
    for result in results:
        if middle_housing_only and not result.is_middle_housing:
            continue
        mapping = columns or resolve_columns(result.original.keys())
        address = extract_permit_text(result.original, mapping).address.strip()
        if not address:
            continue
        tasks.append(_locate(result, address))

    return list(await asyncio.gather(*tasks))
