# buzzly/db/repositories/user_repo.py
from datetime import datetime
from typing import List, Optional
from sqlmodel import select, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.db.models import User, Follow
from buzzly.db.repositories.base import BaseRepository


def _contains_pattern(query: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.lower()}%"


class UserRepository(BaseRepository[User]):
    async def get_by_email(self, session: AsyncSession, *, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email)
        result = await session.execute(statement)
        return result.scalars().first()

    async def get_by_username(self, session: AsyncSession, *, username: str) -> Optional[User]:
        statement = select(User).where(func.lower(User.username) == username.lower())
        result = await session.execute(statement)
        return result.scalars().first()

    async def get_many(self, session: AsyncSession, *, ids: set[str]) -> dict[str, User]:
        if not ids:
            return {}
        result = await session.execute(select(User).where(User.id.in_(list(ids))))
        return {user.id: user for user in result.scalars().all()}

    async def search(self, session: AsyncSession, *, query: str, limit: int = 50) -> List[User]:
        pattern = _contains_pattern(query)
        statement = (
            select(User)
            .where(
                or_(
                    func.lower(User.username).like(pattern, escape="\\"),
                    func.lower(User.email).like(pattern, escape="\\"),
                )
            )
            .order_by(User.username)
            .limit(limit)
        )
        result = await session.execute(statement)
        return result.scalars().all()

    async def get_recent(self, session: AsyncSession, *, limit: int = 20) -> List[User]:
        statement = select(User).order_by(User.created_at.desc()).limit(limit)
        result = await session.execute(statement)
        return result.scalars().all()

    async def count(self, session: AsyncSession, *, blocked: Optional[bool] = None, since: Optional[datetime] = None) -> int:
        statement = select(func.count()).select_from(User)
        if blocked is not None:
            statement = statement.where(User.is_blocked == blocked)
        if since is not None:
            statement = statement.where(User.created_at >= since)
        return (await session.execute(statement)).scalar_one()

user_repo = UserRepository(User)


class FollowRepository(BaseRepository[Follow]):
    async def get_link(self, session: AsyncSession, *, follower_id: str, followed_id: str) -> Optional[Follow]:
        return await session.get(Follow, (follower_id, followed_id))

    async def following_ids(self, session: AsyncSession, *, user_id: str) -> List[str]:
        result = await session.execute(select(Follow.followed_id).where(Follow.follower_id == user_id))
        return list(result.scalars().all())

    async def follower_ids(self, session: AsyncSession, *, user_id: str) -> List[str]:
        result = await session.execute(select(Follow.follower_id).where(Follow.followed_id == user_id))
        return list(result.scalars().all())

    async def count_followers(self, session: AsyncSession, *, user_id: str) -> int:
        statement = select(func.count()).select_from(Follow).where(Follow.followed_id == user_id)
        return (await session.execute(statement)).scalar_one()

    async def count_following(self, session: AsyncSession, *, user_id: str) -> int:
        statement = select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        return (await session.execute(statement)).scalar_one()

    async def all_links(self, session: AsyncSession) -> List[Follow]:
        result = await session.execute(select(Follow))
        return result.scalars().all()

follow_repo = FollowRepository(Follow)
