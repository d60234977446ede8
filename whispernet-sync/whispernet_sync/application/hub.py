"""
Data synchronization hub - refresh, normalize and cache remote data domains
"""
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
import asyncio
import logging

from .formatting import format_feed_item, has_coordinates
from .location import LocationResolver, parse_coordinates
from .store import DataStore
from ..config import settings
from ..domain.gateways import IPositionProvider, IRemoteDataGateway
from ..domain.models import (
    Domain,
    FeedItem,
    RefreshOutcome,
    SETTING_NAMES,
    UNKNOWN_PLACE,
    UserSettings,
)
from ..errors import RemoteDataError, UnknownSettingError
from ..schemas import PopularTag, ProfileRecord, SavedPost

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Any]]


def unwrap_data(payload: Any) -> Any:
    """Payloads are either the record itself or {"data": record}"""
    if isinstance(payload, dict) and payload.get("data") is not None:
        return payload["data"]
    return payload


def require_success(payload: Any, what: str) -> Any:
    """Return `data` of a {"status": "success", "data": ...} payload"""
    if not isinstance(payload, dict) or payload.get("status") != "success":
        raise RemoteDataError(f"Unsuccessful {what} response")
    data = payload.get("data")
    if data is None:
        raise RemoteDataError(f"Missing {what} data")
    return data


def normalize_settings(pairs: List[Any]) -> UserSettings:
    """Convert [{setting|name, value}, ...] into a UserSettings record.

    1 and "1" are true, anything else false. Unknown names are ignored and
    names that are not present stay None.
    """
    values: Dict[str, bool] = {}
    for item in pairs:
        if not isinstance(item, dict) or "value" not in item:
            continue
        name = item.get("setting", item.get("name"))
        if name in SETTING_NAMES:
            value = item["value"]
            values[name] = not isinstance(value, bool) and value in (1, "1")
    return UserSettings(**values)


class DataSyncHub:
    """Owns the per-domain cache and every operation that writes to it.

    Refreshes are fail-soft: a failed fetch resets the domain to its empty
    value and is logged, never raised.
    """

    def __init__(
        self,
        gateway: IRemoteDataGateway,
        resolver: LocationResolver,
        position_provider: Optional[IPositionProvider] = None,
        store: Optional[DataStore] = None,
        dedupe_concurrent: Optional[bool] = None,
        media_base_url: Optional[str] = None,
        default_position: Optional[Tuple[float, float]] = None
    ):
        self.gateway = gateway
        self.resolver = resolver
        self.position_provider = position_provider
        self.store = store or DataStore()
        self.dedupe_concurrent = (
            settings.DEDUPE_CONCURRENT_REFRESH if dedupe_concurrent is None else dedupe_concurrent
        )
        self.media_base_url = media_base_url
        self.default_position = default_position or (
            settings.DEFAULT_LATITUDE,
            settings.DEFAULT_LONGITUDE,
        )
        self._in_flight: Dict[Domain, "asyncio.Future[RefreshOutcome]"] = {}

    # Settle machinery
    async def _settle(self, domain: Domain, load: Loader) -> RefreshOutcome:
        """Run `load` for a domain, joining an in-flight run when deduping"""
        if not self.dedupe_concurrent:
            return await self._run(domain, load)

        pending = self._in_flight.get(domain)
        if pending is not None:
            logger.debug(f"Joining in-flight {domain.value} refresh")
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._run(domain, load))
        self._in_flight[domain] = task
        task.add_done_callback(lambda done: self._forget(domain, done))
        # Cancelling this caller must not cancel the run its joiners share
        return await asyncio.shield(task)

    def _forget(self, domain: Domain, task: "asyncio.Future[RefreshOutcome]"):
        if self._in_flight.get(domain) is task:
            del self._in_flight[domain]

    async def _run(self, domain: Domain, load: Loader) -> RefreshOutcome:
        entry = self.store.entry(domain)
        with entry.loading():
            try:
                value = await load()
            except Exception as e:
                logger.error(f"Failed to refresh {domain.value}: {e}")
                self.store.reset(domain)
                return RefreshOutcome.failure(domain, entry.value, e)
            self.store.replace(domain, value)
            return RefreshOutcome.success(domain, value)

    # Profile
    async def _load_profile(self) -> ProfileRecord:
        payload = await self.gateway.get_profile()
        if payload is None:
            raise RemoteDataError("Profile request failed")
        return ProfileRecord.model_validate(unwrap_data(payload))

    async def refresh_profile(self) -> RefreshOutcome:
        """Reload the current user's profile"""
        return await self._settle(Domain.PROFILE, self._load_profile)

    # Settings
    async def _load_settings(self) -> UserSettings:
        payload = await self.gateway.get_settings()
        if payload is None:
            raise RemoteDataError("Settings request failed")
        pairs = unwrap_data(payload)
        if not isinstance(pairs, list):
            raise RemoteDataError("Settings payload is not a list")
        return normalize_settings(pairs)

    async def refresh_settings(self) -> RefreshOutcome:
        """Reload the user's settings"""
        return await self._settle(Domain.SETTINGS, self._load_settings)

    def update_local_setting(self, name: str, value: bool):
        """Overlay one setting in the cache without contacting the API"""
        if name not in SETTING_NAMES:
            raise UnknownSettingError(name)
        current = self.store.settings or UserSettings()
        self.store.replace(Domain.SETTINGS, replace(current, **{name: value}))

    # Saved items
    async def _load_saved_items(self) -> List[SavedPost]:
        payload = await self.gateway.get_saved_items()
        data = require_success(payload, "saved posts")
        return [SavedPost.model_validate(item) for item in data]

    async def refresh_saved_items(self) -> RefreshOutcome:
        """Reload bookmarked posts; the count always follows the list"""
        return await self._settle(Domain.SAVED_ITEMS, self._load_saved_items)

    # Trending feed
    async def _current_position(self) -> Tuple[float, float]:
        """Device position, or the default position when unavailable"""
        default = self.default_position
        if self.position_provider is None:
            return default

        try:
            if not await self.position_provider.request_permission():
                logger.info("Location permission denied, using default position")
                return default
            return await self.position_provider.current_position()
        except Exception as e:
            logger.error(f"Could not get device position: {e}")
            return default

    async def format_trending_item(self, raw: Dict[str, Any]) -> FeedItem:
        """Format one raw trending record, resolving an unknown place name"""
        distance = raw.get("city") or UNKNOWN_PLACE

        position = parse_coordinates(raw.get("latitude"), raw.get("longitude"))
        if distance == UNKNOWN_PLACE and has_coordinates(raw) and position is not None:
            try:
                distance = await self.resolver.resolve_place_name(*position)
            except Exception as e:
                logger.error(f"Place resolution failed for post {raw.get('post_id')}: {e}")

        return format_feed_item(raw, distance, media_base_url=self.media_base_url)

    async def _load_trending_feed(self) -> List[FeedItem]:
        latitude, longitude = await self._current_position()
        payload = await self.gateway.get_trending_feed(latitude, longitude)
        data = require_success(payload, "trending posts")
        return list(await asyncio.gather(
            *(self.format_trending_item(raw) for raw in data)
        ))

    async def refresh_trending_feed(self) -> RefreshOutcome:
        """Reload trending posts near the device"""
        return await self._settle(Domain.TRENDING_FEED, self._load_trending_feed)

    # Tags
    async def _load_tags(self) -> List[PopularTag]:
        payload = await self.gateway.get_popular_tags()
        data = require_success(payload, "popular tags")
        return [PopularTag.model_validate(item) for item in data]

    async def refresh_tags(self) -> RefreshOutcome:
        """Reload popular tags"""
        return await self._settle(Domain.TAGS, self._load_tags)

    # Bulk operations
    async def load_essential(self) -> List[RefreshOutcome]:
        """Refresh profile and settings concurrently and wait for both.

        Saved items, trending feed and tags load on demand instead.
        """
        results = await asyncio.gather(
            self.refresh_profile(),
            self.refresh_settings(),
            return_exceptions=True,
        )
        outcomes = []
        for domain, result in zip((Domain.PROFILE, Domain.SETTINGS), results):
            if isinstance(result, BaseException):
                logger.error(f"Essential refresh of {domain.value} raised: {result}")
                result = RefreshOutcome.failure(domain, self.store.entry(domain).value, result)
            outcomes.append(result)
        logger.info("Essential data loaded")
        return outcomes

    def clear_all(self):
        """Reset every domain to its empty value; loading flags are untouched"""
        for domain in Domain:
            self.store.reset(domain)
        logger.info("Cleared all cached data")

    def snapshot(self):
        return self.store.snapshot()
