"""Tests for geocoding services."""

from __future__ import annotations

import httpx
import pytest

from middlehousing.core.config import GeocodingConfig
from middlehousing.core.types import GeocodedLocation
from middlehousing.gis.service import (
    MockGeocoder,
    NominatimGeocoder,
    create_geocoder,
    geocode_results,
)
from middlehousing.ingest.csv_loader import parse_csv
from middlehousing.ingest.pipeline import classify_rows

from tests.conftest import PERMIT_CSV


@pytest.fixture
def geocoder():
    return MockGeocoder()


def _nominatim_config(**overrides) -> GeocodingConfig:
    defaults = {"provider": "nominatim", "base_url": "http://geocoder.test"}
    defaults.update(overrides)
    return GeocodingConfig(**defaults)


class TestMockGeocoder:
    @pytest.mark.asyncio
    async def test_exact(self, geocoder):
        location = await geocoder.geocode("123 Main St, Seattle, WA")
        assert location == GeocodedLocation(lat=47.5990, lng=-122.3280)

    @pytest.mark.asyncio
    async def test_case_insensitive(self, geocoder):
        assert await geocoder.geocode("123 MAIN ST, SEATTLE, WA") is not None

    @pytest.mark.asyncio
    async def test_partial(self, geocoder):
        location = await geocoder.geocode("4500 Fremont Ave N")
        assert location is not None
        assert location.lat == pytest.approx(47.662)

    @pytest.mark.asyncio
    async def test_not_found(self, geocoder):
        assert await geocoder.geocode("999 Nowhere Ln") is None

    @pytest.mark.asyncio
    async def test_empty_address(self, geocoder):
        assert await geocoder.geocode("   ") is None

    @pytest.mark.asyncio
    async def test_custom_locations(self):
        geocoder = MockGeocoder({"1 Test Way": GeocodedLocation(lat=1.0, lng=2.0)})
        assert await geocoder.geocode("1 test way") == GeocodedLocation(lat=1.0, lng=2.0)
        assert await geocoder.geocode("123 Main St") is None


class TestFactory:
    def test_creates_mock(self):
        assert isinstance(create_geocoder(GeocodingConfig(provider="mock")), MockGeocoder)

    def test_creates_nominatim(self):
        assert isinstance(create_geocoder(_nominatim_config()), NominatimGeocoder)

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown geocoding provider"):
            create_geocoder(GeocodingConfig(provider="nope"))


class TestNominatimGeocoder:
    @pytest.mark.asyncio
    async def test_geocode(self, httpx_mock):
        httpx_mock.add_response(json=[{"lat": "47.61", "lon": "-122.33"}])
        geocoder = NominatimGeocoder(_nominatim_config())
        try:
            location = await geocoder.geocode("100 Pine St")
            assert location == GeocodedLocation(lat=47.61, lng=-122.33)
            request = httpx_mock.get_request()
            assert request.url.path == "/search"
            assert request.url.params["q"] == "100 Pine St, Seattle, WA"
            assert request.url.params["format"] == "json"
        finally:
            await geocoder.close()

    @pytest.mark.asyncio
    async def test_city_not_appended_twice(self, httpx_mock):
        httpx_mock.add_response(json=[{"lat": "47.61", "lon": "-122.33"}])
        geocoder = NominatimGeocoder(_nominatim_config())
        try:
            await geocoder.geocode("100 Pine St, Seattle")
            assert httpx_mock.get_request().url.params["q"] == "100 Pine St, Seattle"
        finally:
            await geocoder.close()

    @pytest.mark.asyncio
    async def test_no_match(self, httpx_mock):
        httpx_mock.add_response(json=[])
        geocoder = NominatimGeocoder(_nominatim_config())
        try:
            assert await geocoder.geocode("999 Nowhere Ln") is None
        finally:
            await geocoder.close()

    @pytest.mark.asyncio
    async def test_server_error(self, httpx_mock):
        httpx_mock.add_response(status_code=500)
        geocoder = NominatimGeocoder(_nominatim_config())
        try:
            assert await geocoder.geocode("100 Pine St") is None
        finally:
            await geocoder.close()

    @pytest.mark.asyncio
    async def test_connection_error(self, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))
        geocoder = NominatimGeocoder(_nominatim_config())
        try:
            assert await geocoder.geocode("100 Pine St") is None
        finally:
            await geocoder.close()

    @pytest.mark.asyncio
    async def test_malformed_payload(self, httpx_mock):
        httpx_mock.add_response(json=[{"latitude": 1}])
        geocoder = NominatimGeocoder(_nominatim_config())
        try:
            assert await geocoder.geocode("100 Pine St") is None
        finally:
            await geocoder.close()

    @pytest.mark.asyncio
    async def test_results_cached(self, httpx_mock):
        httpx_mock.add_response(json=[{"lat": "47.61", "lon": "-122.33"}])
        geocoder = NominatimGeocoder(_nominatim_config())
        try:
            first = await geocoder.geocode("100 Pine St")
            second = await geocoder.geocode("100 Pine St")
            assert first == second
            assert len(httpx_mock.get_requests()) == 1
        finally:
            await geocoder.close()

    @pytest.mark.asyncio
    async def test_cache_evicts_least_recent(self, httpx_mock):
        for _ in range(4):
            httpx_mock.add_response(json=[{"lat": "47.61", "lon": "-122.33"}])
        geocoder = NominatimGeocoder(_nominatim_config(cache_size=2))
        try:
            await geocoder.geocode("100 Pine St")
            await geocoder.geocode("200 Pike St")
            await geocoder.geocode("100 Pine St")
            await geocoder.geocode("300 Union St")
            assert len(httpx_mock.get_requests()) == 3

            # "200 Pike St" was least recently used and has been dropped
            await geocoder.geocode("200 Pike St")
            assert len(httpx_mock.get_requests()) == 4
            await geocoder.geocode("300 Union St")
            assert len(httpx_mock.get_requests()) == 4
        finally:
            await geocoder.close()


class _ExplodingGeocoder:
    async def geocode(self, address: str) -> GeocodedLocation | None:
        if "Main" in address:
            raise RuntimeError("geocoder down")
        return GeocodedLocation(lat=0.0, lng=0.0)


class TestGeocodeResults:
    @pytest.mark.asyncio
    async def test_middle_housing_points(self, engine, geocoder):
        results = classify_rows(parse_csv(PERMIT_CSV), engine)
        points = await geocode_results(results, geocoder)
        assert [p.address for p in points] == ["123 Main St", "999 Nowhere Ln"]
        assert points[0].location is not None
        assert points[1].location is None
        assert points[1].result.is_middle_housing

    @pytest.mark.asyncio
    async def test_all_records(self, engine, geocoder):
        results = classify_rows(parse_csv(PERMIT_CSV), engine)
        points = await geocode_results(results, geocoder, middle_housing_only=False)
        assert len(points) == 4

    @pytest.mark.asyncio
    async def test_records_without_address_skipped(self, engine, geocoder):
        results = classify_rows([{"Description": "Construct DADU", "Address": ""}], engine)
        assert await geocode_results(results, geocoder) == []

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_other_records(self, engine):
        results = classify_rows(parse_csv(PERMIT_CSV), engine)
        points = await geocode_results(results, _ExplodingGeocoder())
        assert points[0].location is None
        assert points[1].location == GeocodedLocation(lat=0.0, lng=0.0)
        assert [p.result for p in points] == [r for r in results if r.is_middle_housing]
