"""
Domain models - Core client-side entities
"""
from dataclasses import dataclass, field, fields, asdict
from typing import Optional, List, Dict, Any
from enum import Enum


# Place-name sentinels. The feed formatter branches on UNKNOWN_PLACE only.
UNKNOWN_PLACE = "Unknown"
UNKNOWN_LOCATION = "Unknown Location"
CURRENT_LOCATION = "Current Location"


class Domain(str, Enum):
    """Independently cached category of remote data"""
    PROFILE = "profile"
    SETTINGS = "settings"
    SAVED_ITEMS = "saved_items"
    TRENDING_FEED = "trending_feed"
    TAGS = "tags"


class VoteState(str, Enum):
    """Current user's vote on a post"""
    UP = "up"
    DOWN = "down"
    NONE = "none"

    @classmethod
    def parse(cls, raw: Any) -> "VoteState":
        if raw in ("up", "down"):
            return cls(raw)
        return cls.NONE


@dataclass(frozen=True)
class ManagePermissions:
    """What the current user may do with a post"""
    can_delete: bool = False
    can_report: bool = True
    can_save: bool = True
    is_bookmarked: bool = False
    vote_state: VoteState = VoteState.NONE

    @classmethod
    def from_raw(cls, raw: Optional[Dict[str, Any]]) -> "ManagePermissions":
        """Build from the API's `manage` object, defaulting any missing key"""
        raw = raw if isinstance(raw, dict) else {}
        return cls(
            can_delete=bool(raw.get("delete", False)),
            can_report=bool(raw.get("report", True)),
            can_save=bool(raw.get("save", True)),
            is_bookmarked=bool(raw.get("bookmarked", False)),
            vote_state=VoteState.parse(raw.get("voted")),
        )


@dataclass(frozen=True)
class FeedItem:
    """Display-ready feed post"""
    id: str
    text: str
    username: str
    timestamp: str
    upvotes: int = 0
    downvotes: int = 0
    comment_count: int = 0
    distance: str = UNKNOWN_PLACE
    score: float = 0.0
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    profile_image: Optional[str] = None
    has_media: bool = False
    post_media: Any = None
    media_types: List[str] = field(default_factory=list)
    is_user_post: bool = False
    manage: ManagePermissions = field(default_factory=ManagePermissions)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["manage"]["vote_state"] = self.manage.vote_state.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeedItem":
        values = dict(data)
        manage = values.pop("manage", None) or {}
        values["manage"] = ManagePermissions(
            can_delete=manage.get("can_delete", False),
            can_report=manage.get("can_report", True),
            can_save=manage.get("can_save", True),
            is_bookmarked=manage.get("is_bookmarked", False),
            vote_state=VoteState.parse(manage.get("vote_state")),
        )
        return cls(**values)


@dataclass(frozen=True)
class UserSettings:
    """Boolean preferences; None means the server did not send the key"""
    push_notifications: Optional[bool] = None
    email_notifications: Optional[bool] = None
    profile_visibility: Optional[bool] = None
    search_visibility: Optional[bool] = None
    dark_mode: Optional[bool] = None


SETTING_NAMES = frozenset(f.name for f in fields(UserSettings))


@dataclass(frozen=True)
class PlaceResult:
    """Outcome of a single geocoding lookup"""
    city: Optional[str] = None
    country: Optional[str] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class AuthIdentity:
    """Signed-in identity as reported by the auth layer"""
    user_id: str
    is_anonymous: bool = False
    username: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class AuthState:
    """Authentication state observed by the lifecycle coordinator"""
    is_authenticated: bool
    identity: Optional[AuthIdentity] = None


@dataclass(frozen=True)
class MediaFile:
    """Media attachment for a new post"""
    content: bytes
    content_type: str
    name: Optional[str] = None


@dataclass(frozen=True)
class Credentials:
    """Token and device UUID sent with every API call"""
    token: str
    user_uuid: str


@dataclass(frozen=True)
class RefreshOutcome:
    """Settled result of a domain refresh: Loaded(value) or Failed -> empty"""
    domain: Domain
    loaded: bool
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, domain: Domain, value: Any) -> "RefreshOutcome":
        return cls(domain=domain, loaded=True, value=value)

    @classmethod
    def failure(cls, domain: Domain, empty: Any, error: BaseException) -> "RefreshOutcome":
        return cls(domain=domain, loaded=False, value=empty, error=error)
