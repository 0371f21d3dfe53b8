from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from buzzly.schemas.auth import UserPublic


class PostCreate(BaseModel):
    content: Optional[str] = Field(default=None, max_length=5000)
    image: Optional[str] = None


class CommentCreate(BaseModel):
    content: str = Field(max_length=2000)


class CommentPublic(BaseModel):
    id: str
    post_id: str
    content: str
    author: UserPublic
    created_at: datetime
    like_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class PostPublic(BaseModel):
    id: str
    author_id: str
    content: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime
    author: UserPublic
    like_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class PostDetail(PostPublic):
    comments: List[CommentPublic] = []


class LikeToggleResponse(BaseModel):
    liked: bool
    like_count: int
