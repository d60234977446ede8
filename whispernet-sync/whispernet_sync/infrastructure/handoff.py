"""
Key-value store for the just-created post handed from the composer to the feed
"""
import redis.asyncio as redis
from typing import Optional, Dict
import logging
import json

from ..config import settings
from ..domain.gateways import IHandoffStore
from ..domain.models import FeedItem

logger = logging.getLogger(__name__)


class HandoffStore(IHandoffStore):
    """Single-slot handoff, kept in process memory or in Redis"""

    def __init__(
        self,
        backend: Optional[str] = None,
        key: Optional[str] = None,
        client: Optional[redis.Redis] = None,
        redis_url: Optional[str] = None,
        redis_password: Optional[str] = None,
        ttl: Optional[int] = None
    ):
        self.backend = backend or settings.HANDOFF_BACKEND
        self.key = key or settings.HANDOFF_KEY
        self.redis_url = redis_url or settings.REDIS_URL
        self.redis_password = redis_password if redis_url else settings.REDIS_PASSWORD
        self.ttl = settings.HANDOFF_TTL if ttl is None else ttl
        self.client: Optional[redis.Redis] = client
        self._memory: Dict[str, str] = {}

    async def connect(self):
        """Connect to Redis when the redis backend is selected"""
        if self.backend != "redis":
            logger.info("Handoff store using in-process memory")
            return

        if self.client is not None:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                password=self.redis_password or None,
                encoding="utf-8",
                decode_responses=True,
            )
            # Test connection
            await self.client.ping()
            logger.info("Handoff store connected to Redis")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.client = None

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Handoff store disconnected")

    @property
    def _uses_redis(self) -> bool:
        return self.backend == "redis"

    async def put(self, item: FeedItem) -> bool:
        """Store the just-created feed item, replacing any previous one"""
        data = json.dumps(item.to_dict())

        if not self._uses_redis:
            self._memory[self.key] = data
            return True

        if not self.client:
            return False

        try:
            await self.client.set(self.key, data, ex=self.ttl)
            return True
        except Exception as e:
            logger.error(f"Failed to store handoff item: {e}")
            return False

    async def take(self) -> Optional[FeedItem]:
        """Read the stored item once; it is removed on read"""
        if not self._uses_redis:
            data = self._memory.pop(self.key, None)
        elif not self.client:
            return None
        else:
            try:
                data = await self.client.getdel(self.key)
            except Exception as e:
                logger.error(f"Failed to read handoff item: {e}")
                return None

        if not data:
            return None

        try:
            return FeedItem.from_dict(json.loads(data))
        except (ValueError, TypeError) as e:
            logger.error(f"Discarding malformed handoff item: {e}")
            return None

    async def clear(self) -> bool:
        """Drop any stored item"""
        if not self._uses_redis:
            self._memory.pop(self.key, None)
            return True

        if not self.client:
            return False

        try:
            await self.client.delete(self.key)
            return True
        except Exception as e:
            logger.error(f"Failed to clear handoff item: {e}")
            return False
