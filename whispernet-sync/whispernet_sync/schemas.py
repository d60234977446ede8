"""
Pydantic schemas for payloads returned by the remote API
"""
from pydantic import BaseModel
from typing import Optional, Union


# Profile schemas
class ProfileStatistics(BaseModel):
    """Aggregate activity counts for a profile"""
    comments: Optional[int] = None
    votes: Optional[int] = None
    posts: Optional[int] = None


class ProfileRecord(BaseModel):
    """Current user's profile"""
    user_id: Optional[Union[int, str]] = None
    username: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    gender: Optional[str] = None
    statistics: Optional[ProfileStatistics] = None
    two_factor_setup: Optional[Union[int, str]] = None
    profile_image: Optional[str] = None
    is_verified: Optional[Union[int, str, bool]] = None
    is_active: Optional[Union[int, str, bool]] = None
    last_login: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    location: Optional[str] = None

    class Config:
        extra = "allow"


# Saved (bookmarked) posts
class SavedPost(BaseModel):
    """Saved post summary"""
    id: Optional[Union[int, str]] = None
    title: Optional[str] = None
    content: Optional[str] = None

    class Config:
        extra = "allow"


# Tag schemas
class PopularTag(BaseModel):
    """Popularity-ranked tag"""
    tag_id: Union[int, str]
    name: str
    usage_count: int = 0

    class Config:
        extra = "allow"
