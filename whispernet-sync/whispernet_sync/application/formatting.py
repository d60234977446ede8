"""
Defensive parsing of raw post records into display-ready feed items
"""
import re
from typing import Optional, Dict, Any, Tuple

from ..config import settings
from ..domain.models import FeedItem, ManagePermissions, UNKNOWN_PLACE

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")
_LEADING_FLOAT = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def to_int(value: Any) -> int:
    """Leading integer of the value's text, 0 when there is none"""
    if value is None or isinstance(value, bool):
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def to_float(value: Any) -> Optional[float]:
    """Leading float of the value's text, None when there is none"""
    if value is None or isinstance(value, bool):
        return None
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else None


def absolute_media_url(path: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    """Turn a server-relative media path into an absolute URL"""
    if not path:
        return None
    path = str(path)
    if path.startswith(("http://", "https://")):
        return path
    base = (base_url or settings.MEDIA_BASE_URL).rstrip("/")
    return f"{base}/{path.lstrip('/')}"


def has_coordinates(raw: Dict[str, Any]) -> bool:
    return bool(raw.get("latitude")) and bool(raw.get("longitude"))


def format_feed_item(
    raw: Dict[str, Any],
    distance: str = UNKNOWN_PLACE,
    coordinates: Optional[Tuple[float, float]] = None,
    is_user_post: bool = False,
    media_base_url: Optional[str] = None
) -> FeedItem:
    """Build a FeedItem from a raw post record.

    `coordinates` overrides the record's own latitude/longitude.
    """
    if coordinates is not None:
        latitude, longitude = coordinates
    else:
        latitude = to_float(raw.get("latitude")) if raw.get("latitude") else None
        longitude = to_float(raw.get("longitude")) if raw.get("longitude") else None

    return FeedItem(
        id=str(raw.get("post_id") or ""),
        text=raw.get("content") or "",
        username=raw.get("username") or "",
        timestamp=raw.get("ago") or "",
        upvotes=to_int(raw.get("upvotes")),
        downvotes=to_int(raw.get("downvotes")),
        comment_count=to_int(raw.get("comments_count")),
        distance=distance,
        score=to_float(raw.get("score")) or 0.0,
        latitude=latitude,
        longitude=longitude,
        profile_image=absolute_media_url(raw.get("profile_image"), media_base_url),
        has_media=bool(raw.get("has_media")),
        post_media=raw.get("post_media"),
        media_types=list(raw.get("media_types") or []),
        is_user_post=is_user_post,
        manage=ManagePermissions.from_raw(raw.get("manage")),
    )
