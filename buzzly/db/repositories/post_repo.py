# buzzly/db/repositories/post_repo.py
from datetime import datetime
from typing import List, Optional
from sqlmodel import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from buzzly.db.models import Post, Comment, Like
from buzzly.db.repositories.base import BaseRepository

class PostRepository(BaseRepository[Post]):
    async def get_feed(
        self, session: AsyncSession, *, author_ids: List[str], limit: int = 20
    ) -> List[Post]:
        statement = (
            select(Post)
            .where(Post.author_id.in_(author_ids))
            .options(selectinload(Post.author))
            .order_by(Post.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(statement)
        return result.scalars().all()

    async def get_by_author(self, session: AsyncSession, *, author_id: str) -> List[Post]:
        statement = (
            select(Post)
            .where(Post.author_id == author_id)
            .options(selectinload(Post.author))
            .order_by(Post.created_at.desc())
        )
        result = await session.execute(statement)
        return result.scalars().all()

    async def get_by_id_with_author(self, session: AsyncSession, *, id: str) -> Optional[Post]:
        statement = select(Post).where(Post.id == id).options(selectinload(Post.author))
        result = await session.execute(statement)
        return result.scalars().first()

    async def get_by_id_with_comments(self, session: AsyncSession, *, id: str) -> Optional[Post]:
        statement = (
            select(Post)
            .where(Post.id == id)
            .options(
                selectinload(Post.author),
                selectinload(Post.comments).selectinload(Comment.author),
            )
        )
        result = await session.execute(statement)
        return result.scalars().first()

    async def get_for_delete(self, session: AsyncSession, *, id: str) -> Optional[Post]:
        """Load a post with everything its delete cascades into."""
        statement = (
            select(Post)
            .where(Post.id == id)
            .options(
                selectinload(Post.likes),
                selectinload(Post.comments).selectinload(Comment.likes),
            )
        )
        result = await session.execute(statement)
        return result.scalars().first()

    async def get_since(self, session: AsyncSession, *, since: datetime) -> List[Post]:
        statement = select(Post).where(Post.created_at >= since).order_by(Post.created_at.desc())
        result = await session.execute(statement)
        return result.scalars().all()

    async def count(self, session: AsyncSession) -> int:
        return (await session.execute(select(func.count()).select_from(Post))).scalar_one()

post_repo = PostRepository(Post)


class CommentRepository(BaseRepository[Comment]):
    async def get_comments_for_post(
        self, session: AsyncSession, *, post_id: str, skip: int = 0, limit: int = 25
    ) -> List[Comment]:
        statement = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .options(selectinload(Comment.author))
            .order_by(Comment.created_at.asc())
            .offset(skip)
            .limit(limit)
        )
        result = await session.execute(statement)
        return result.scalars().all()

    async def get_with_author(self, session: AsyncSession, *, id: str) -> Optional[Comment]:
        statement = select(Comment).where(Comment.id == id).options(selectinload(Comment.author))
        result = await session.execute(statement)
        return result.scalars().first()

comment_repo = CommentRepository(Comment)


class LikeRepository(BaseRepository[Like]):
    async def find(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        post_id: Optional[str] = None,
        comment_id: Optional[str] = None,
    ) -> Optional[Like]:
        statement = select(Like).where(
            Like.user_id == user_id,
            Like.post_id == post_id if post_id else Like.post_id.is_(None),
            Like.comment_id == comment_id if comment_id else Like.comment_id.is_(None),
        )
        result = await session.execute(statement)
        return result.scalars().first()

    async def add_once(self, session: AsyncSession, *, like: Like) -> bool:
        """Insert the like, or return False when an identical like already exists."""
        session.add(like)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            return False
        return True

    async def count_for(
        self, session: AsyncSession, *, post_id: Optional[str] = None, comment_id: Optional[str] = None
    ) -> int:
        statement = select(func.count()).select_from(Like)
        if comment_id:
            statement = statement.where(Like.comment_id == comment_id)
        else:
            statement = statement.where(Like.post_id == post_id, Like.comment_id.is_(None))
        return (await session.execute(statement)).scalar_one()

    async def counts_for_posts(self, session: AsyncSession, *, post_ids: List[str]) -> dict[str, int]:
        if not post_ids:
            return {}
        statement = (
            select(Like.post_id, func.count())
            .where(Like.post_id.in_(post_ids), Like.comment_id.is_(None))
            .group_by(Like.post_id)
        )
        result = await session.execute(statement)
        return {post_id: count for post_id, count in result.all()}

    async def counts_for_comments(self, session: AsyncSession, *, comment_ids: List[str]) -> dict[str, int]:
        if not comment_ids:
            return {}
        statement = (
            select(Like.comment_id, func.count())
            .where(Like.comment_id.in_(comment_ids))
            .group_by(Like.comment_id)
        )
        result = await session.execute(statement)
        return {comment_id: count for comment_id, count in result.all()}

like_repo = LikeRepository(Like)
