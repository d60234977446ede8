"""
Per-domain cache entries owned by the sync hub
"""
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional
import logging

from ..domain.models import Domain, FeedItem, UserSettings
from ..schemas import PopularTag, ProfileRecord, SavedPost

logger = logging.getLogger(__name__)

Listener = Callable[[Domain], None]

# Empty representation of each domain
EMPTY_VALUES: Dict[Domain, Callable[[], Any]] = {
    Domain.PROFILE: lambda: None,
    Domain.SETTINGS: lambda: None,
    Domain.SAVED_ITEMS: list,
    Domain.TRENDING_FEED: list,
    Domain.TAGS: list,
}


class DomainEntry:
    """Cached value and loading flag for one domain"""

    def __init__(self, domain: Domain):
        self.domain = domain
        self._value: Any = EMPTY_VALUES[domain]()
        self._in_flight = 0

    @property
    def value(self) -> Any:
        return self._value

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    def empty(self) -> Any:
        return EMPTY_VALUES[self.domain]()

    @contextmanager
    def loading(self) -> Iterator["DomainEntry"]:
        """Mark a fetch as in flight for the duration of the block"""
        self._in_flight += 1
        try:
            yield self
        finally:
            self._in_flight -= 1


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time copy of every domain"""
    profile: Optional[ProfileRecord]
    settings: Optional[UserSettings]
    saved_items: List[SavedPost]
    saved_items_count: int
    trending_feed: List[FeedItem]
    tags: List[PopularTag]
    loading: Dict[Domain, bool]


class DataStore:
    """Process-wide cache of all domains.

    Values are replaced, never mutated in place. Only the hub writes.
    """

    def __init__(self):
        self.entries: Dict[Domain, DomainEntry] = {
            domain: DomainEntry(domain) for domain in Domain
        }
        self._listeners: List[Listener] = []

    def entry(self, domain: Domain) -> DomainEntry:
        return self.entries[domain]

    # Read access
    @property
    def profile(self) -> Optional[ProfileRecord]:
        return self.entries[Domain.PROFILE].value

    @property
    def settings(self) -> Optional[UserSettings]:
        return self.entries[Domain.SETTINGS].value

    @property
    def saved_items(self) -> List[SavedPost]:
        return self.entries[Domain.SAVED_ITEMS].value

    @property
    def saved_items_count(self) -> int:
        return len(self.entries[Domain.SAVED_ITEMS].value)

    @property
    def trending_feed(self) -> List[FeedItem]:
        return self.entries[Domain.TRENDING_FEED].value

    @property
    def tags(self) -> List[PopularTag]:
        return self.entries[Domain.TAGS].value

    def is_loading(self, domain: Domain) -> bool:
        return self.entries[domain].is_loading

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            profile=self.profile,
            settings=self.settings,
            saved_items=list(self.saved_items),
            saved_items_count=self.saved_items_count,
            trending_feed=list(self.trending_feed),
            tags=list(self.tags),
            loading={domain: entry.is_loading for domain, entry in self.entries.items()},
        )

    # Change notification
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(domain)` after every value change; returns an unsubscribe"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, domain: Domain):
        for listener in list(self._listeners):
            try:
                listener(domain)
            except Exception as e:
                logger.error(f"Store listener failed for {domain.value}: {e}")

    # Writes (hub only)
    def replace(self, domain: Domain, value: Any):
        self.entries[domain]._value = value
        self._notify(domain)

    def reset(self, domain: Domain):
        entry = self.entries[domain]
        entry._value = entry.empty()
        self._notify(domain)
