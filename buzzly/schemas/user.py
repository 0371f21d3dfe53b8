from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from buzzly.schemas.auth import UserPublic, UserRead


class UserProfile(UserPublic):
    created_at: Optional[datetime] = None
    follower_count: int = 0
    following_count: int = 0


class UserUpdateModel(BaseModel):
    bio: Optional[str] = Field(default=None, max_length=500)
    profile_picture: Optional[str] = None


class FollowResponse(BaseModel):
    following: bool
    follower_count: int
    user: UserPublic


# --- Admin views ---
class BlockToggleResponse(BaseModel):
    user_id: str
    blocked: bool
    message: str


class AdminStats(BaseModel):
    total_users: int
    blocked_users: int
    active_users: int
    total_posts: int
    new_users: int
    pending_reports: int


class UserFollowCounts(BaseModel):
    id: str
    username: str
    email: str
    profile_picture: Optional[str] = None
    blocked: bool = False
    is_admin: bool = False
    follower_count: int = 0
    following_count: int = 0


class UserRef(BaseModel):
    id: str
    username: str


class FollowRelationship(UserRef):
    following: List[UserRef]


class FollowerStats(BaseModel):
    top_users: List[UserFollowCounts]
    all_users: List[UserFollowCounts]
    follow_relationships: List[FollowRelationship]


class PostExcerpt(BaseModel):
    id: str
    content: Optional[str] = None
    created_at: datetime


class ExcessivePoster(BaseModel):
    user: UserRead
    post_count: int
    latest_posts: List[PostExcerpt]
