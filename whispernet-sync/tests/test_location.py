"""Tests for the cascading location resolver."""

import pytest

from whispernet_sync.application.location import (
    LocationResolver,
    PlaceCache,
    parse_coordinates,
)
from whispernet_sync.domain.models import PlaceResult


@pytest.fixture
def location_resolver(gateway, geocoder):
    return LocationResolver(gateway, geocoder, cache_size=0)


class TestParseCoordinates:

    def test_numeric_strings(self):
        assert parse_coordinates("39.78", "-89.65") == (39.78, -89.65)

    def test_leading_number_with_trailing_text(self):
        assert parse_coordinates("37.5abc", " -122.4deg") == (37.5, -122.4)

    def test_rejects_text_and_nan(self):
        assert parse_coordinates("abc", "1") is None
        assert parse_coordinates(float("nan"), 1.0) is None
        assert parse_coordinates(None, 1.0) is None


class TestPrimaryLookup:

    @pytest.mark.asyncio
    async def test_nested_location(self, location_resolver, gateway):
        gateway.resolve_location.return_value = {"location": {"city": "Paris", "country": "France"}}

        result = await location_resolver.lookup_primary(48.85, 2.35)

        assert result == PlaceResult(city="Paris", country="France")

    @pytest.mark.asyncio
    async def test_top_level_city(self, location_resolver, gateway):
        gateway.resolve_location.return_value = {"city": "", "country": "France"}

        result = await location_resolver.lookup_primary(48.85, 2.35)

        assert result.city == "Unknown"

    @pytest.mark.asyncio
    async def test_failure(self, location_resolver, gateway):
        result = await location_resolver.lookup_primary(48.85, 2.35)

        assert result.failed


class TestSecondaryLookup:

    @pytest.mark.asyncio
    async def test_field_priority(self, location_resolver, geocoder):
        geocoder.reverse.return_value = {
            "address": {"village": "Oakdale", "county": "Stanislaus", "country": "US"},
            "display_name": "Somewhere, Else",
        }

        result = await location_resolver.lookup_secondary(37.7, -120.8)

        assert result == PlaceResult(city="Oakdale", country="US")

    @pytest.mark.asyncio
    async def test_display_name_fallback(self, location_resolver, geocoder):
        geocoder.reverse.return_value = {
            "address": {"road": "Main St"},
            "display_name": "Smalltown, Some County, Country",
        }

        result = await location_resolver.lookup_secondary(1.0, 2.0)

        assert result.city == "Smalltown"

    @pytest.mark.asyncio
    async def test_no_address(self, location_resolver, geocoder):
        geocoder.reverse.return_value = {"error": "Unable to geocode"}

        result = await location_resolver.lookup_secondary(1.0, 2.0)

        assert result.city == "Unknown Location"

    @pytest.mark.asyncio
    async def test_invalid_coordinates_skip_network(self, location_resolver, geocoder):
        result = await location_resolver.lookup_secondary("north", "east")

        assert result.error == "Invalid coordinates"
        geocoder.reverse.assert_not_called()


class TestResolvePlaceName:

    @pytest.mark.asyncio
    async def test_primary_wins(self, location_resolver, gateway, geocoder):
        gateway.resolve_location.return_value = {"city": "Lyon"}

        assert await location_resolver.resolve_place_name(45.7, 4.8) == "Lyon"
        geocoder.reverse.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_when_primary_is_unknown(self, location_resolver, gateway, geocoder):
        gateway.resolve_location.return_value = {"location": {"city": "Unknown"}}
        geocoder.reverse.return_value = {"address": {"city": "Springfield"}}

        assert await location_resolver.resolve_place_name(39.78, -89.65) == "Springfield"
        geocoder.reverse.assert_awaited_once_with(39.78, -89.65)

    @pytest.mark.asyncio
    async def test_both_fail(self, location_resolver, gateway, geocoder):
        assert await location_resolver.resolve_place_name(39.78, -89.65) == "Unknown"

    @pytest.mark.asyncio
    async def test_both_raise(self, location_resolver, gateway, geocoder):
        gateway.resolve_location.side_effect = RuntimeError("api down")
        geocoder.reverse.side_effect = TimeoutError("slow")

        assert await location_resolver.resolve_place_name(39.78, -89.65) == "Unknown"

    @pytest.mark.asyncio
    async def test_secondary_sentinel_is_preserved(self, location_resolver, gateway, geocoder):
        geocoder.reverse.return_value = {"address": {}}

        assert await location_resolver.resolve_place_name(0, 0) == "Unknown Location"

    @pytest.mark.asyncio
    async def test_non_numeric_coordinates(self, location_resolver, gateway, geocoder):
        assert await location_resolver.resolve_place_name("abc", "def") == "Unknown"
        geocoder.reverse.assert_not_called()


class TestResolveCityAndCountry:

    @pytest.mark.asyncio
    async def test_country_from_winning_source(self, location_resolver, gateway, geocoder):
        gateway.resolve_location.return_value = {"city": "Unknown", "country": "France"}
        geocoder.reverse.return_value = {"address": {"town": "Annecy", "country": "France"}}

        result = await location_resolver.resolve_city_and_country(45.9, 6.1)

        assert result == PlaceResult(city="Annecy", country="France")

    @pytest.mark.asyncio
    async def test_primary_without_country(self, location_resolver, gateway):
        gateway.resolve_location.return_value = {"city": "Lyon"}

        result = await location_resolver.resolve_city_and_country(45.7, 4.8)

        assert result == PlaceResult(city="Lyon", country=None)

    @pytest.mark.asyncio
    async def test_total_failure(self, location_resolver):
        result = await location_resolver.resolve_city_and_country(45.7, 4.8)

        assert result == PlaceResult(city="Unknown")


class TestPlaceCache:

    @pytest.mark.asyncio
    async def test_repeated_coordinates_hit_cache(self, gateway, geocoder):
        resolver = LocationResolver(gateway, geocoder, cache_size=4)
        gateway.resolve_location.return_value = {"city": "Lyon"}

        await resolver.resolve_place_name(45.7, 4.8)
        await resolver.resolve_place_name("45.7", "4.8")

        assert gateway.resolve_location.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_results_are_not_cached(self, gateway, geocoder):
        resolver = LocationResolver(gateway, geocoder, cache_size=4)

        await resolver.resolve_place_name(45.7, 4.8)
        await resolver.resolve_place_name(45.7, 4.8)

        assert gateway.resolve_location.await_count == 2

    def test_evicts_least_recently_used(self):
        cache = PlaceCache(max_size=2)
        cache.put((1.0, 1.0), PlaceResult(city="A"))
        cache.put((2.0, 2.0), PlaceResult(city="B"))
        cache.get((1.0, 1.0))
        cache.put((3.0, 3.0), PlaceResult(city="C"))

        assert len(cache) == 2
        assert cache.get((2.0, 2.0)) is None
        assert cache.get((1.0, 1.0)).city == "A"
