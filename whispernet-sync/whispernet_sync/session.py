"""
Sync session - builds the sync core and owns its lifetime
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import logging

import httpx

from .config import Settings, settings as default_settings
from .application.account import AccountService
from .application.hub import DataSyncHub
from .application.lifecycle import LifecycleCoordinator
from .application.location import LocationResolver
from .application.posts import PostComposer
from .domain.gateways import IPositionProvider
from .domain.models import AuthState
from .infrastructure.geocoding import NominatimClient
from .infrastructure.handoff import HandoffStore
from .infrastructure.service_client import RemoteDataGateway

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings = default_settings):
    """Configure root logging for an application embedding the sync core"""
    logging.basicConfig(
        level=logging.INFO if not settings.DEBUG else logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class SyncSession:
    """One sync core per signed-in app process"""

    def __init__(
        self,
        settings: Settings = default_settings,
        position_provider: Optional[IPositionProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        geocoder_transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings

        self.gateway = RemoteDataGateway(
            base_url=settings.API_BASE_URL,
            transport=transport,
            timeout=settings.HTTP_TIMEOUT,
            connect_timeout=settings.HTTP_CONNECT_TIMEOUT,
        )
        self.geocoder = NominatimClient(
            base_url=settings.NOMINATIM_URL,
            user_agent=settings.NOMINATIM_USER_AGENT,
            transport=geocoder_transport,
            zoom=settings.NOMINATIM_ZOOM,
            timeout=settings.HTTP_TIMEOUT,
            connect_timeout=settings.HTTP_CONNECT_TIMEOUT,
        )
        self.handoff = HandoffStore(
            backend=settings.HANDOFF_BACKEND,
            key=settings.HANDOFF_KEY,
            redis_url=settings.REDIS_URL,
            redis_password=settings.REDIS_PASSWORD,
            ttl=settings.HANDOFF_TTL,
        )
        self.resolver = LocationResolver(
            self.gateway,
            self.geocoder,
            cache_size=settings.LOCATION_CACHE_SIZE,
        )
        self.hub = DataSyncHub(
            self.gateway,
            self.resolver,
            position_provider=position_provider,
            dedupe_concurrent=settings.DEDUPE_CONCURRENT_REFRESH,
            media_base_url=settings.MEDIA_BASE_URL,
            default_position=(settings.DEFAULT_LATITUDE, settings.DEFAULT_LONGITUDE),
        )
        self.composer = PostComposer(
            self.gateway,
            self.resolver,
            self.handoff,
            media_base_url=settings.MEDIA_BASE_URL,
        )
        self.account = AccountService(self.hub, self.gateway)
        self.coordinator = LifecycleCoordinator(self.hub)

    async def start(self):
        logger.info(f"Starting {self.settings.APP_NAME} v{self.settings.APP_VERSION}...")

        await self.gateway.start()
        await self.geocoder.start()
        await self.handoff.connect()

        # A handoff value left over from a previous run is stale
        await self.composer.discard_new_post()

        logger.info("Sync session started")

    async def stop(self):
        logger.info("Stopping sync session...")

        await self.handoff.disconnect()
        await self.geocoder.stop()
        await self.gateway.stop()

        logger.info("Sync session stopped")

    async def __aenter__(self) -> "SyncSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    def set_credentials(self, token: str, user_uuid: str):
        self.gateway.set_credentials(token, user_uuid)

    async def on_auth_change(self, state: AuthState):
        """Forward an auth transition to the lifecycle coordinator"""
        if not state.is_authenticated:
            self.gateway.clear_credentials()
        await self.coordinator.on_auth_change(state)


@asynccontextmanager
async def lifespan(
    settings: Settings = default_settings,
    position_provider: Optional[IPositionProvider] = None
) -> AsyncIterator[SyncSession]:
    """Session lifespan manager"""
    session = SyncSession(settings, position_provider=position_provider)
    await session.start()
    try:
        yield session
    finally:
        await session.stop()
