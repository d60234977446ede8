"""End-to-end tests for the sync session over mocked HTTP."""

import httpx
import pytest

from whispernet_sync.config import Settings
from whispernet_sync.domain.models import AuthIdentity, AuthState
from whispernet_sync.session import SyncSession

API_ROUTES = {
    "/api/users/profile": {"data": {"user_id": "u1", "username": "ana"}},
    "/api/users/settings": {"data": [{"setting": "dark_mode", "value": "1"}]},
    "/api/posts/trending": {
        "status": "success",
        "data": [{
            "post_id": "p1",
            "content": "hi",
            "username": "bo",
            "ago": "1h",
            "upvotes": "4",
            "downvotes": "0",
            "comments_count": "1",
            "city": "Unknown",
            "latitude": "39.78",
            "longitude": "-89.65",
        }],
    },
    "/api/users/location": {"city": "Unknown"},
}


def api_handler(request: httpx.Request) -> httpx.Response:
    body = API_ROUTES.get(request.url.path)
    if body is None:
        return httpx.Response(404, json={"error": "not found"})
    return httpx.Response(200, json=body)


def geo_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"address": {"city": "Springfield", "country": "US"}})


@pytest.fixture
def test_settings():
    return Settings(
        API_BASE_URL="https://api.test/api",
        MEDIA_BASE_URL="https://media.test/",
        NOMINATIM_URL="https://geo.test",
        HANDOFF_BACKEND="memory",
    )


def make_session(test_settings):
    return SyncSession(
        test_settings,
        transport=httpx.MockTransport(api_handler),
        geocoder_transport=httpx.MockTransport(geo_handler),
    )


class TestSyncSession:

    @pytest.mark.asyncio
    async def test_sign_in_and_out(self, test_settings):
        async with make_session(test_settings) as session:
            session.set_credentials("tok", "uuid")

            await session.on_auth_change(
                AuthState(is_authenticated=True, identity=AuthIdentity(user_id="u1"))
            )

            snap = session.hub.snapshot()
            assert snap.profile.username == "ana"
            assert snap.settings.dark_mode is True

            await session.on_auth_change(AuthState(is_authenticated=False))

            snap = session.hub.snapshot()
            assert snap.profile is None
            assert snap.settings is None
            assert session.gateway.credentials is None

    @pytest.mark.asyncio
    async def test_trending_feed_falls_back_to_public_geocoder(self, test_settings):
        async with make_session(test_settings) as session:
            outcome = await session.hub.refresh_trending_feed()

            assert outcome.loaded
            [item] = session.hub.store.trending_feed
            assert item.distance == "Springfield"
            assert item.upvotes == 4

    @pytest.mark.asyncio
    async def test_clients_closed_on_exit(self, test_settings):
        session = make_session(test_settings)
        async with session:
            assert session.gateway.client is not None

        assert session.gateway.client is None
        assert session.geocoder.client is None

    @pytest.mark.asyncio
    async def test_injected_settings_reach_every_component(self):
        seen = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return api_handler(request)

        custom = Settings(
            API_BASE_URL="https://api.test/api",
            NOMINATIM_URL="https://geo.test",
            HANDOFF_BACKEND="memory",
            DEFAULT_LATITUDE=51.5,
            DEFAULT_LONGITUDE=-0.1,
            HTTP_TIMEOUT=1.0,
            HTTP_CONNECT_TIMEOUT=0.5,
            NOMINATIM_ZOOM=14,
            HANDOFF_TTL=30,
        )
        session = SyncSession(
            custom,
            transport=httpx.MockTransport(recording_handler),
            geocoder_transport=httpx.MockTransport(geo_handler),
        )

        async with session:
            await session.hub.refresh_trending_feed()

        [trending] = [r for r in seen if r.url.path == "/api/posts/trending"]
        assert trending.url.params["latitude"] == "51.5"
        assert trending.url.params["longitude"] == "-0.1"
        assert session.gateway.timeout == httpx.Timeout(1.0, connect=0.5)
        assert session.geocoder.timeout == httpx.Timeout(1.0, connect=0.5)
        assert session.geocoder.zoom == 14
        assert session.handoff.ttl == 30
