"""
Gateway interfaces - Define contracts for the core's external collaborators
"""
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, Tuple, Union

from .models import FeedItem, MediaFile

Coordinate = Union[float, int, str]


class IRemoteDataGateway(ABC):
    """Remote data API.

    Every call returns the decoded JSON payload, or None when the call failed.
    """

    @abstractmethod
    async def get_profile(self) -> Optional[Dict[str, Any]]:
        """Get the current user's profile"""
        pass

    @abstractmethod
    async def update_profile(self, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update profile fields"""
        pass

    @abstractmethod
    async def get_settings(self) -> Optional[Any]:
        """Get the user's settings as a list of name/value pairs"""
        pass

    @abstractmethod
    async def update_setting(self, name: str, value: str) -> Optional[Dict[str, Any]]:
        """Write a single setting"""
        pass

    @abstractmethod
    async def get_saved_items(self) -> Optional[Dict[str, Any]]:
        """Get bookmarked posts"""
        pass

    @abstractmethod
    async def get_trending_feed(
        self,
        latitude: Coordinate,
        longitude: Coordinate
    ) -> Optional[Dict[str, Any]]:
        """Get trending posts around a position"""
        pass

    @abstractmethod
    async def get_popular_tags(self) -> Optional[Dict[str, Any]]:
        """Get popularity-ranked tags"""
        pass

    @abstractmethod
    async def create_post(
        self,
        content: str,
        latitude: float,
        longitude: float,
        media: Optional[List[MediaFile]] = None
    ) -> Optional[Dict[str, Any]]:
        """Create a new post"""
        pass

    @abstractmethod
    async def resolve_location(
        self,
        latitude: Coordinate,
        longitude: Coordinate
    ) -> Optional[Dict[str, Any]]:
        """Resolve coordinates to a city/country (primary geocoder)"""
        pass


class IReverseGeocoder(ABC):
    """Public reverse-geocoding service (fallback geocoder)"""

    @abstractmethod
    async def reverse(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        """Get address details for a position, or None on failure"""
        pass


class IPositionProvider(ABC):
    """Device geolocation"""

    @abstractmethod
    async def request_permission(self) -> bool:
        """Ask for foreground location permission; True when granted"""
        pass

    @abstractmethod
    async def current_position(self) -> Tuple[float, float]:
        """Get the current (latitude, longitude)"""
        pass


class IHandoffStore(ABC):
    """Single transient value passed from the composer to the feed screen"""

    @abstractmethod
    async def put(self, item: FeedItem) -> bool:
        """Store the just-created feed item"""
        pass

    @abstractmethod
    async def take(self) -> Optional[FeedItem]:
        """Read and remove the stored item"""
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """Drop any stored item"""
        pass
