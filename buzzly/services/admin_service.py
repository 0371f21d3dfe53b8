"""Moderator dashboards: user search, platform counts and posting activity."""
import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.core.config import settings
from buzzly.db.models import ReportStatus, User, UserRole
from buzzly.db.repositories.post_repo import post_repo
from buzzly.db.repositories.report_repo import report_repo
from buzzly.db.repositories.user_repo import user_repo, follow_repo
from buzzly.schemas.auth import UserRead
from buzzly.schemas.user import (
    AdminStats,
    ExcessivePoster,
    FollowerStats,
    FollowRelationship,
    PostExcerpt,
    UserFollowCounts,
    UserRef,
)

logger = logging.getLogger(__name__)

NEW_USER_WINDOW = timedelta(days=7)
TOP_USERS = 10
LATEST_POSTS_SHOWN = 3


def start_of_utc_day(now: datetime) -> datetime:
    return now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


class AdminService:
    async def search_users(self, session: AsyncSession, *, query: str) -> List[User]:
        if not query.strip():
            return await user_repo.get_recent(session, limit=20)
        return await user_repo.search(session, query=query.strip())

    async def stats(self, session: AsyncSession) -> AdminStats:
        total_users = await user_repo.count(session)
        blocked_users = await user_repo.count(session, blocked=True)
        return AdminStats(
            total_users=total_users,
            blocked_users=blocked_users,
            active_users=total_users - blocked_users,
            total_posts=await post_repo.count(session),
            new_users=await user_repo.count(session, since=datetime.now(timezone.utc) - NEW_USER_WINDOW),
            pending_reports=await report_repo.count_by_status(session, status=ReportStatus.PENDING),
        )

    async def follower_stats(self, session: AsyncSession) -> FollowerStats:
        users = await user_repo.get_all(session, limit=None)
        links = await follow_repo.all_links(session)

        followers = Counter(link.followed_id for link in links)
        following = defaultdict(list)
        for link in links:
            following[link.follower_id].append(link.followed_id)

        by_id = {user.id: user for user in users}
        all_users = [
            UserFollowCounts(
                id=user.id,
                username=user.username,
                email=user.email,
                profile_picture=user.profile_picture,
                blocked=user.is_blocked,
                is_admin=user.role == UserRole.ADMIN,
                follower_count=followers[user.id],
                following_count=len(following.get(user.id, [])),
            )
            for user in users
        ]
        top_users = sorted(all_users, key=lambda u: u.follower_count, reverse=True)[:TOP_USERS]
        relationships = [
            FollowRelationship(
                id=user_id,
                username=by_id[user_id].username,
                following=[
                    UserRef(id=followed_id, username=by_id[followed_id].username)
                    for followed_id in followed_ids
                    if followed_id in by_id
                ],
            )
            for user_id, followed_ids in following.items()
            if user_id in by_id
        ]
        return FollowerStats(top_users=top_users, all_users=all_users, follow_relationships=relationships)

    async def excessive_posters(self, session: AsyncSession) -> List[ExcessivePoster]:
        """Users who posted more than the daily threshold since midnight UTC."""
        posts = await post_repo.get_since(session, since=start_of_utc_day(datetime.now(timezone.utc)))

        by_author = defaultdict(list)
        for post in posts:
            by_author[post.author_id].append(post)

        flagged = {
            author_id: author_posts
            for author_id, author_posts in by_author.items()
            if len(author_posts) > settings.EXCESSIVE_POSTS_PER_DAY
        }
        users = await user_repo.get_many(session, ids=set(flagged))

        result = [
            ExcessivePoster(
                user=UserRead.model_validate(users[author_id]),
                post_count=len(author_posts),
                latest_posts=[
                    PostExcerpt(id=post.id, content=post.content, created_at=post.created_at)
                    for post in author_posts[:LATEST_POSTS_SHOWN]
                ],
            )
            for author_id, author_posts in flagged.items()
            if author_id in users
        ]
        if result:
            logger.info(f"{len(result)} users over the daily post threshold")
        return sorted(result, key=lambda entry: entry.post_count, reverse=True)

admin_service = AdminService()
