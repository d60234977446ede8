"""Shared fixtures for the sync core tests."""

from unittest.mock import AsyncMock

import pytest

from whispernet_sync.application.hub import DataSyncHub
from whispernet_sync.application.location import LocationResolver
from whispernet_sync.domain.gateways import (
    IPositionProvider,
    IRemoteDataGateway,
    IReverseGeocoder,
)


@pytest.fixture
def gateway():
    """Remote data gateway double; every call fails unless a test says otherwise."""
    gw = AsyncMock(spec=IRemoteDataGateway)
    for name in (
        "get_profile", "update_profile", "get_settings", "update_setting",
        "get_saved_items", "get_trending_feed", "get_popular_tags",
        "create_post", "resolve_location",
    ):
        getattr(gw, name).return_value = None
    return gw


@pytest.fixture
def geocoder():
    geo = AsyncMock(spec=IReverseGeocoder)
    geo.reverse.return_value = None
    return geo


@pytest.fixture
def resolver():
    res = AsyncMock(spec=LocationResolver)
    res.resolve_place_name.return_value = "Springfield"
    return res


@pytest.fixture
def position_provider():
    provider = AsyncMock(spec=IPositionProvider)
    provider.request_permission.return_value = True
    provider.current_position.return_value = (40.1, -89.2)
    return provider


@pytest.fixture
def hub(gateway, resolver):
    return DataSyncHub(
        gateway,
        resolver,
        dedupe_concurrent=False,
        media_base_url="https://media.test/",
    )

