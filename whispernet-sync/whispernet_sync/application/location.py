"""
Cascading coordinate-to-place resolution
"""
from collections import OrderedDict
from typing import Optional, Dict, Any, Tuple
import logging
import math

from .formatting import to_float
from ..config import settings
from ..domain.gateways import IRemoteDataGateway, IReverseGeocoder, Coordinate
from ..domain.models import PlaceResult, UNKNOWN_PLACE, UNKNOWN_LOCATION

logger = logging.getLogger(__name__)

# Nominatim address fields, most specific first
ADDRESS_FIELDS = ("city", "town", "village", "hamlet", "municipality", "county")


def parse_coordinates(
    latitude: Coordinate,
    longitude: Coordinate
) -> Optional[Tuple[float, float]]:
    """Leading numbers of both coordinates as finite floats, or None when
    either has no numeric prefix"""
    lat = to_float(latitude)
    lng = to_float(longitude)
    if lat is None or lng is None:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return lat, lng


def _usable(result: PlaceResult) -> bool:
    return bool(result.city) and result.city != UNKNOWN_PLACE


class PlaceCache:
    """Bounded LRU of coordinates to resolved places"""

    def __init__(self, max_size: int):
        self.max_size = max_size
        self._cache: "OrderedDict[Tuple[float, float], PlaceResult]" = OrderedDict()

    @staticmethod
    def _key(position: Tuple[float, float]) -> Tuple[float, float]:
        # ~1 m precision
        return round(position[0], 5), round(position[1], 5)

    def get(self, position: Tuple[float, float]) -> Optional[PlaceResult]:
        key = self._key(position)
        if key not in self._cache:
            return None
        self._cache.move_to_end(key)
        return self._cache[key]

    def put(self, position: Tuple[float, float], result: PlaceResult):
        key = self._key(position)
        self._cache[key] = result
        self._cache.move_to_end(key)
        while len(self._cache) > self.max_size:
            self._cache.popitem(last=False)

    def __len__(self) -> int:
        return len(self._cache)


class LocationResolver:
    """Primary API first, then the public reverse geocoder, then a sentinel.

    None of the public methods raise: every failure ends in a place string.
    """

    def __init__(
        self,
        primary: IRemoteDataGateway,
        secondary: IReverseGeocoder,
        cache_size: Optional[int] = None
    ):
        self.primary = primary
        self.secondary = secondary
        size = settings.LOCATION_CACHE_SIZE if cache_size is None else cache_size
        self.cache: Optional[PlaceCache] = PlaceCache(size) if size > 0 else None

    async def lookup_primary(self, latitude: Coordinate, longitude: Coordinate) -> PlaceResult:
        """Ask the remote API for the place at a position"""
        try:
            response = await self.primary.resolve_location(latitude, longitude)
        except Exception as e:
            logger.error(f"Primary location lookup raised: {e}")
            response = None

        if response is None:
            return PlaceResult(error="Failed to get location from API")

        location = response.get("location") if isinstance(response, dict) else None
        if isinstance(location, dict):
            return PlaceResult(
                city=location.get("city") or UNKNOWN_PLACE,
                country=location.get("country"),
            )
        if isinstance(response, dict) and "city" in response:
            return PlaceResult(
                city=response.get("city") or UNKNOWN_PLACE,
                country=response.get("country"),
            )
        return PlaceResult(city=UNKNOWN_PLACE)

    async def lookup_secondary(self, latitude: Coordinate, longitude: Coordinate) -> PlaceResult:
        """Ask the public reverse geocoder for the place at a position"""
        position = parse_coordinates(latitude, longitude)
        if position is None:
            return PlaceResult(error="Invalid coordinates")

        try:
            data = await self.secondary.reverse(*position)
        except Exception as e:
            logger.error(f"Reverse geocoding raised: {e}")
            data = None

        if data is None:
            return PlaceResult(error="Failed to get location")

        address = data.get("address") if isinstance(data, dict) else None
        if not address:
            return PlaceResult(city=UNKNOWN_LOCATION)

        return PlaceResult(
            city=self._pick_place(address, data.get("display_name")) or UNKNOWN_LOCATION,
            country=address.get("country"),
        )

    @staticmethod
    def _pick_place(address: Dict[str, Any], display_name: Optional[str]) -> Optional[str]:
        for name in ADDRESS_FIELDS:
            if address.get(name):
                return address[name]
        if display_name:
            return display_name.split(",")[0].strip() or None
        return None

    async def _cascade(self, latitude: Coordinate, longitude: Coordinate) -> PlaceResult:
        position = parse_coordinates(latitude, longitude)
        if self.cache is not None and position is not None:
            cached = self.cache.get(position)
            if cached is not None:
                logger.debug(f"Place cache hit for {position}")
                return cached

        result = await self.lookup_primary(latitude, longitude)
        if not _usable(result):
            fallback = await self.lookup_secondary(latitude, longitude)
            result = PlaceResult(
                city=fallback.city or UNKNOWN_PLACE,
                country=fallback.country,
            )

        if self.cache is not None and position is not None and _usable(result) \
                and result.city != UNKNOWN_LOCATION:
            self.cache.put(position, result)
        return result

    async def resolve_place_name(self, latitude: Coordinate, longitude: Coordinate) -> str:
        """City name for a position, or "Unknown" if both sources fail"""
        try:
            result = await self._cascade(latitude, longitude)
            return result.city or UNKNOWN_PLACE
        except Exception as e:
            logger.error(f"Place resolution failed for ({latitude}, {longitude}): {e}")
            return UNKNOWN_PLACE

    async def resolve_city_and_country(
        self,
        latitude: Coordinate,
        longitude: Coordinate
    ) -> PlaceResult:
        """City and, when the winning source supplies it, country"""
        try:
            result = await self._cascade(latitude, longitude)
            return PlaceResult(city=result.city or UNKNOWN_PLACE, country=result.country)
        except Exception as e:
            logger.error(f"Place resolution failed for ({latitude}, {longitude}): {e}")
            return PlaceResult(city=UNKNOWN_PLACE)
