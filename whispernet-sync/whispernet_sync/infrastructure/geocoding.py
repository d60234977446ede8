"""
Reverse geocoding through the public OpenStreetMap Nominatim service
"""
import httpx
from typing import Optional, Dict, Any
import logging

from ..config import settings
from ..domain.gateways import IReverseGeocoder

logger = logging.getLogger(__name__)


class NominatimClient(IReverseGeocoder):
    """Fallback geocoder; rate-limited, must send an identifying User-Agent"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        zoom: Optional[int] = None,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None
    ):
        self.base_url = base_url or settings.NOMINATIM_URL
        self.user_agent = user_agent or settings.NOMINATIM_USER_AGENT
        self.zoom = settings.NOMINATIM_ZOOM if zoom is None else zoom
        self.timeout = httpx.Timeout(
            settings.HTTP_TIMEOUT if timeout is None else timeout,
            connect=settings.HTTP_CONNECT_TIMEOUT if connect_timeout is None else connect_timeout
        )
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def start(self):
        """Initialize HTTP client"""
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"User-Agent": self.user_agent},
        )
        logger.info("Nominatim client initialized")

    async def stop(self):
        """Close HTTP client"""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Nominatim client closed")

    async def reverse(self, latitude: float, longitude: float) -> Optional[Dict[str, Any]]:
        """Get address details for a position"""
        if not self.client:
            logger.error("Nominatim client not initialized")
            return None

        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "addressdetails": 1,
            "zoom": self.zoom,
        }

        try:
            response = await self.client.get("/reverse", params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Nominatim HTTP error {e.response.status_code}: {e}")
            return None
        except Exception as e:
            logger.error(f"Nominatim request failed: {e}")
            return None
