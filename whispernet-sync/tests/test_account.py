"""Tests for optimistic preference toggles and profile updates."""

import asyncio

import pytest

from whispernet_sync.application.account import AccountService
from whispernet_sync.errors import UnknownSettingError


@pytest.fixture
def account(hub, gateway):
    return AccountService(hub, gateway)


class TestSetPreference:

    @pytest.mark.asyncio
    async def test_success_keeps_local_value(self, account, hub, gateway):
        gateway.update_setting.return_value = {"status": "success"}

        assert await account.set_preference("dark_mode", True)

        gateway.update_setting.assert_awaited_once_with("dark_mode", "1")
        assert hub.store.settings.dark_mode is True

    @pytest.mark.asyncio
    async def test_local_value_applies_before_write_completes(self, account, hub, gateway):
        release = asyncio.Event()

        async def slow_write(name, value):
            await release.wait()
            return {"status": "success"}

        gateway.update_setting.side_effect = slow_write
        task = asyncio.create_task(account.set_preference("push_notifications", True))
        await asyncio.sleep(0)

        assert hub.store.settings.push_notifications is True

        release.set()
        await task

    @pytest.mark.asyncio
    async def test_failure_reverts(self, account, hub, gateway):
        assert not await account.set_preference("email_notifications", False)

        gateway.update_setting.assert_awaited_once_with("email_notifications", "false")
        assert hub.store.settings.email_notifications is True

    @pytest.mark.asyncio
    async def test_unknown_setting(self, account, gateway):
        with pytest.raises(UnknownSettingError):
            await account.set_preference("theme_color", True)
        gateway.update_setting.assert_not_called()


class TestUpdateProfile:

    @pytest.mark.asyncio
    async def test_success_refreshes_profile(self, account, hub, gateway):
        gateway.update_profile.return_value = {"status": "success"}
        gateway.get_profile.return_value = {"data": {"username": "ana", "bio": "new bio"}}

        assert await account.update_profile({"bio": "new bio"})

        assert hub.store.profile.bio == "new bio"

    @pytest.mark.asyncio
    async def test_failure_skips_refresh(self, account, gateway):
        assert not await account.update_profile({"bio": "x"})

        gateway.get_profile.assert_not_called()
