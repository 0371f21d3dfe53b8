import uuid
import enum
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from sqlalchemy import Column, JSON, Enum, DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


class UserRole(str, enum.Enum):
    GENERAL = "general"
    ADMIN = "admin"


class NotificationType(str, enum.Enum):
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ReportReason(str, enum.Enum):
    INAPPROPRIATE = "Inappropriate content"
    HARASSMENT = "Harassment or bullying"
    SPAM = "Spam"
    MISINFORMATION = "Misinformation"
    HATE_SPEECH = "Hate speech"
    VIOLENCE = "Violence"
    ILLEGAL = "Illegal content"
    OTHER = "Other"


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Link Models for Many-to-Many Relationships
class Follow(SQLModel, table=True):
    follower_id: str = Field(foreign_key="user.id", primary_key=True)
    followed_id: str = Field(foreign_key="user.id", primary_key=True)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True))
    )


# Main Models
class User(SQLModel, table=True):
    id: str = Field(default_factory=generate_uuid, primary_key=True, index=True)
    email: str = Field(unique=True, index=True)
    username: str = Field(unique=True, index=True)
    hashed_password: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    is_blocked: bool = Field(default=False)
    role: UserRole = Field(sa_column=Column(Enum(UserRole)), default=UserRole.GENERAL)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True))
    )

    posts: List["Post"] = Relationship(back_populates="author")

    @property
    def is_moderator(self) -> bool:
        return self.role == UserRole.ADMIN


class Post(SQLModel, table=True):
    id: str = Field(default_factory=generate_uuid, primary_key=True, index=True)
    author_id: str = Field(foreign_key="user.id", index=True)
    content: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), index=True)
    )

    author: User = Relationship(back_populates="posts")
    comments: List["Comment"] = Relationship(
        back_populates="post",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Comment.created_at"},
    )
    likes: List["Like"] = Relationship(
        back_populates="post",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class Comment(SQLModel, table=True):
    id: str = Field(default_factory=generate_uuid, primary_key=True)
    content: str
    author_id: str = Field(foreign_key="user.id")
    post_id: str = Field(foreign_key="post.id", index=True)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True))
    )

    author: User = Relationship()
    post: Post = Relationship(back_populates="comments")
    likes: List["Like"] = Relationship(
        back_populates="comment",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class Like(SQLModel, table=True):
    # one like per user per post or comment; NULL columns never collide
    __table_args__ = (
        UniqueConstraint("user_id", "post_id"),
        UniqueConstraint("user_id", "comment_id"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    post_id: Optional[str] = Field(foreign_key="post.id", default=None)
    comment_id: Optional[str] = Field(foreign_key="comment.id", default=None)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True))
    )

    post: Optional[Post] = Relationship(back_populates="likes")
    comment: Optional[Comment] = Relationship(back_populates="likes")


class Notification(SQLModel, table=True):
    id: str = Field(default_factory=generate_uuid, primary_key=True)
    recipient_id: str = Field(foreign_key="user.id", index=True)
    sender_id: Optional[str] = Field(foreign_key="user.id", default=None)
    notification_type: NotificationType = Field(sa_column=Column(Enum(NotificationType)))
    content: str
    reference_id: Optional[str] = None
    is_read: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True))
    )

    sender: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Notification.sender_id]"}
    )


class Report(SQLModel, table=True):
    # post_id carries no foreign key: a report must survive deletion of its post.
    id: str = Field(default_factory=generate_uuid, primary_key=True)
    post_id: str = Field(index=True)
    reporter_id: str = Field(foreign_key="user.id", index=True)
    reason: ReportReason = Field(sa_column=Column(Enum(ReportReason), nullable=False))
    description: str = ""
    status: ReportStatus = Field(
        sa_column=Column(Enum(ReportStatus), nullable=False, index=True),
        default=ReportStatus.PENDING,
    )
    content_snapshot: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), index=True)
    )
    reviewed_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True))
    )
    reviewed_by: Optional[str] = Field(foreign_key="user.id", default=None)
    admin_notes: Optional[str] = None
