"""
Binds authentication transitions to loading or purging the data cache
"""
from typing import AsyncIterator, Optional, Tuple
import logging

from .hub import DataSyncHub
from ..domain.models import AuthIdentity, AuthState

logger = logging.getLogger(__name__)

_UNSET = object()


class LifecycleCoordinator:
    """Signed-in, non-anonymous users get their essential data loaded;
    signing out clears everything; anonymous sessions are left alone.

    Repeated observations of the same (is_authenticated, identity) pair are
    ignored, so each transition is acted on once.
    """

    def __init__(self, hub: DataSyncHub):
        self.hub = hub
        self._last: object = _UNSET

    async def on_auth_change(self, state: AuthState):
        observed: Tuple[bool, Optional[AuthIdentity]] = (state.is_authenticated, state.identity)
        if observed == self._last:
            return
        self._last = observed

        if state.is_authenticated and state.identity and not state.identity.is_anonymous:
            logger.info(f"User {state.identity.user_id} signed in, loading essential data")
            await self.hub.load_essential()
        elif not state.is_authenticated:
            logger.info("Signed out, clearing cached data")
            self.hub.clear_all()

    async def watch(self, states: AsyncIterator[AuthState]):
        """Apply every auth state from the stream until it ends"""
        async for state in states:
            await self.on_auth_change(state)
