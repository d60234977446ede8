"""
Account writes: optimistic preference toggles and profile updates
"""
from typing import Any, Dict
import logging

from .hub import DataSyncHub
from ..domain.gateways import IRemoteDataGateway

logger = logging.getLogger(__name__)


class AccountService:
    """Writes account data through the gateway and keeps the hub in step"""

    def __init__(self, hub: DataSyncHub, gateway: IRemoteDataGateway):
        self.hub = hub
        self.gateway = gateway

    async def set_preference(self, name: str, value: bool) -> bool:
        """
        Toggle a setting locally right away, then persist it

        Returns:
            True if the API accepted the change; on failure the local
            value is reverted and False is returned
        """
        self.hub.update_local_setting(name, value)

        response = await self.gateway.update_setting(name, "1" if value else "false")
        if response is None:
            logger.error(f"Failed to save setting {name}, reverting")
            self.hub.update_local_setting(name, not value)
            return False

        return True

    async def update_profile(self, updates: Dict[str, Any]) -> bool:
        """Save profile fields and reload the cached profile on success"""
        response = await self.gateway.update_profile(updates)
        if response is None:
            logger.error("Failed to update profile")
            return False

        await self.hub.refresh_profile()
        return True
