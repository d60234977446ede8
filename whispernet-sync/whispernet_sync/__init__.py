"""
WhisperNet sync core - client-side data cache, place resolution and
auth-driven lifecycle for the location-aware feed
"""
from .application.account import AccountService
from .application.hub import DataSyncHub
from .application.lifecycle import LifecycleCoordinator
from .application.location import LocationResolver
from .application.posts import PostComposer
from .application.store import DataStore, StoreSnapshot
from .domain.models import (
    AuthIdentity,
    AuthState,
    Domain,
    FeedItem,
    RefreshOutcome,
    UserSettings,
)
from .session import SyncSession, configure_logging, lifespan

__all__ = [
    "AccountService",
    "AuthIdentity",
    "AuthState",
    "DataStore",
    "DataSyncHub",
    "Domain",
    "FeedItem",
    "LifecycleCoordinator",
    "LocationResolver",
    "PostComposer",
    "RefreshOutcome",
    "StoreSnapshot",
    "SyncSession",
    "UserSettings",
    "configure_logging",
    "lifespan",
]
