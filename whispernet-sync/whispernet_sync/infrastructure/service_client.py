"""
HTTP client for the WhisperNet remote API
"""
import httpx
from typing import Optional, List, Dict, Any, Callable, Awaitable
import logging

from ..config import settings
from ..domain.gateways import IRemoteDataGateway, Coordinate
from ..domain.models import Credentials, MediaFile

logger = logging.getLogger(__name__)


class RemoteDataGateway(IRemoteDataGateway):
    """HTTP gateway for profile, settings, posts, tags and location endpoints"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_unauthorized: Optional[Callable[[], Awaitable[None]]] = None,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None
    ):
        self.base_url = base_url or settings.API_BASE_URL
        self.timeout = httpx.Timeout(
            settings.HTTP_TIMEOUT if timeout is None else timeout,
            connect=settings.HTTP_CONNECT_TIMEOUT if connect_timeout is None else connect_timeout
        )
        self.transport = transport
        self.on_unauthorized = on_unauthorized
        self.credentials: Optional[Credentials] = None
        self.client: Optional[httpx.AsyncClient] = None

    async def start(self):
        """Initialize HTTP client"""
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        )
        logger.info(f"Remote data gateway initialized for {self.base_url}")

    async def stop(self):
        """Close HTTP client"""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Remote data gateway closed")

    def set_credentials(self, token: str, user_uuid: str):
        """Attach the auth token and device UUID to subsequent calls"""
        self.credentials = Credentials(token=token, user_uuid=user_uuid)

    def clear_credentials(self):
        self.credentials = None

    def _auth_fields(self, uuid_field: str = "uuid") -> Dict[str, str]:
        """Token and UUID in the shape each endpoint expects"""
        if not self.credentials:
            return {"token": "", uuid_field: ""}
        return {
            "token": self.credentials.token,
            uuid_field: self.credentials.user_uuid,
        }

    async def _make_request(
        self,
        method: str,
        path: str,
        **kwargs
    ) -> Optional[Any]:
        """Make HTTP request to the API"""
        if not self.client:
            logger.error("Remote data gateway not initialized")
            return None

        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error {e.response.status_code} for {path}: {e}")
            if e.response.status_code == 401 and self.on_unauthorized:
                await self.on_unauthorized()
            return None
        except Exception as e:
            logger.error(f"Request failed for {path}: {e}")
            return None

    # Profile API
    async def get_profile(self) -> Optional[Dict[str, Any]]:
        """Get the current user's profile"""
        return await self._make_request(
            "GET",
            "/users/profile",
            params=self._auth_fields()
        )

    async def update_profile(self, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update profile fields; the user id goes in the path"""
        auth = self._auth_fields()
        user_id = updates.get("user_id") or auth["uuid"]
        payload = {**updates, **auth}
        return await self._make_request(
            "PUT",
            f"/users/update/{user_id}",
            json=payload
        )

    # Settings API
    async def get_settings(self) -> Optional[Any]:
        """Get the user's settings as a list of name/value pairs"""
        return await self._make_request(
            "GET",
            "/users/settings",
            params=self._auth_fields()
        )

    async def update_setting(self, name: str, value: str) -> Optional[Dict[str, Any]]:
        """Write a single setting"""
        payload = {"setting": name, "value": value, **self._auth_fields()}
        return await self._make_request("POST", "/users/update", json=payload)

    # Post API
    async def get_saved_items(self) -> Optional[Dict[str, Any]]:
        """Get bookmarked posts"""
        return await self._make_request(
            "GET",
            "/posts/bookmarked",
            params=self._auth_fields("userUUID")
        )

    async def get_trending_feed(
        self,
        latitude: Coordinate,
        longitude: Coordinate
    ) -> Optional[Dict[str, Any]]:
        """Get trending posts around a position"""
        params = {
            **self._auth_fields("userUUID"),
            "latitude": str(latitude),
            "longitude": str(longitude),
        }
        return await self._make_request("GET", "/posts/trending", params=params)

    async def get_popular_tags(self) -> Optional[Dict[str, Any]]:
        """Get popularity-ranked tags"""
        return await self._make_request(
            "GET",
            "/tags/popular",
            params=self._auth_fields("userUUID")
        )

    async def create_post(
        self,
        content: str,
        latitude: float,
        longitude: float,
        media: Optional[List[MediaFile]] = None
    ) -> Optional[Dict[str, Any]]:
        """Create a new post as a multipart upload"""
        data = {
            "content": content,
            "latitude": str(latitude),
            "longitude": str(longitude),
            **self._auth_fields("userUUID"),
        }

        files = []
        for index, item in enumerate(media or []):
            filename = item.name or f"media_{index}.jpg"
            files.append((f"media[{index}]", (filename, item.content, item.content_type)))

        return await self._make_request(
            "POST",
            "/posts/create",
            data=data,
            files=files or None
        )

    # Location API
    async def resolve_location(
        self,
        latitude: Coordinate,
        longitude: Coordinate
    ) -> Optional[Dict[str, Any]]:
        """Resolve coordinates to a city/country"""
        params = {"latitude": str(latitude), "longitude": str(longitude)}
        return await self._make_request("GET", "/users/location", params=params)
