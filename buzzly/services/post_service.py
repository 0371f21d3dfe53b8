import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.core.config import settings
from buzzly.db.models import Comment, Like, NotificationType, Post
from buzzly.db.repositories.post_repo import post_repo, comment_repo, like_repo
from buzzly.db.repositories.user_repo import user_repo, follow_repo
from buzzly.errors import CommentNotFound, Forbidden, InvalidArgument, PostNotFound, UserNotFound
from buzzly.schemas.post import CommentPublic, LikeToggleResponse, PostCreate, PostDetail, PostPublic
from buzzly.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def _excerpt(text: Optional[str], length: int = 40) -> str:
    if not text:
        return "your post"
    return f'"{text[:length]}..."' if len(text) > length else f'"{text}"'


class PostService:
    async def _with_like_counts(self, session: AsyncSession, posts: List[Post]) -> List[PostPublic]:
        counts = await like_repo.counts_for_posts(session, post_ids=[p.id for p in posts])
        return [
            PostPublic.model_validate(post).model_copy(update={"like_count": counts.get(post.id, 0)})
            for post in posts
        ]

    async def _comments_with_like_counts(self, session: AsyncSession, comments: List[Comment]) -> List[CommentPublic]:
        counts = await like_repo.counts_for_comments(session, comment_ids=[c.id for c in comments])
        return [
            CommentPublic.model_validate(comment).model_copy(update={"like_count": counts.get(comment.id, 0)})
            for comment in comments
        ]

    async def feed(self, session: AsyncSession, *, user_id: str, limit: Optional[int] = None) -> List[PostPublic]:
        """The user's own posts and those of everyone they follow, newest first."""
        author_ids = await follow_repo.following_ids(session, user_id=user_id)
        author_ids.append(user_id)
        posts = await post_repo.get_feed(session, author_ids=author_ids, limit=limit or settings.FEED_LIMIT)
        return await self._with_like_counts(session, posts)

    async def create_post(self, session: AsyncSession, *, author_id: str, data: PostCreate) -> PostPublic:
        content = data.content.strip() if data.content else None
        image = data.image.strip() if data.image else None
        if not content and not image:
            raise InvalidArgument(message="A post needs text or an image")

        post = await post_repo.create(session, obj_in=Post(author_id=author_id, content=content, image=image))
        logger.info(f"Post {post.id} created by {author_id}")
        post = await post_repo.get_by_id_with_author(session, id=post.id)
        return PostPublic.model_validate(post)

    async def posts_by_user(self, session: AsyncSession, *, user_id: str) -> List[PostPublic]:
        if not await user_repo.get(session, user_id):
            raise UserNotFound()
        posts = await post_repo.get_by_author(session, author_id=user_id)
        return await self._with_like_counts(session, posts)

    async def get_post(self, session: AsyncSession, *, post_id: str) -> PostDetail:
        post = await post_repo.get_by_id_with_comments(session, id=post_id)
        if not post:
            raise PostNotFound()

        like_count = await like_repo.count_for(session, post_id=post.id)
        comments = await self._comments_with_like_counts(session, post.comments)
        return PostDetail(
            **PostPublic.model_validate(post).model_dump(exclude={"like_count"}),
            like_count=like_count,
            comments=comments,
        )

    async def delete_post(
        self, session: AsyncSession, *, post_id: str, actor_id: str, actor_is_moderator: bool
    ) -> None:
        """Remove a post with its comments and likes. Reports against it are kept."""
        post = await post_repo.get_for_delete(session, id=post_id)
        if not post:
            raise PostNotFound()
        if post.author_id != actor_id and not actor_is_moderator:
            raise Forbidden(message="You do not have permission to delete this post.")

        await post_repo.delete(session, obj=post)
        logger.info(f"Post {post_id} deleted by {actor_id}")

    async def add_comment(
        self, session: AsyncSession, *, post_id: str, author_id: str, content: str
    ) -> CommentPublic:
        text = content.strip() if content else ""
        if not text:
            raise InvalidArgument(message="Comment cannot be empty")

        post = await post_repo.get(session, post_id)
        if not post:
            raise PostNotFound()

        comment = await comment_repo.create(
            session, obj_in=Comment(content=text, author_id=author_id, post_id=post_id)
        )
        comment = await comment_repo.get_with_author(session, id=comment.id)
        await notification_service.create_notification(
            session,
            recipient_id=post.author_id,
            sender_id=author_id,
            notification_type=NotificationType.COMMENT,
            content=f"{comment.author.username} commented on {_excerpt(post.content)}",
            reference_id=post.id,
        )
        return CommentPublic.model_validate(comment)

    async def list_comments(
        self, session: AsyncSession, *, post_id: str, skip: int = 0, limit: int = 25
    ) -> List[CommentPublic]:
        if not await post_repo.get(session, post_id):
            raise PostNotFound()
        comments = await comment_repo.get_comments_for_post(session, post_id=post_id, skip=skip, limit=limit)
        return await self._comments_with_like_counts(session, comments)

    async def toggle_post_like(self, session: AsyncSession, *, post_id: str, user_id: str) -> LikeToggleResponse:
        post = await post_repo.get(session, post_id)
        if not post:
            raise PostNotFound()

        existing_like = await like_repo.find(session, user_id=user_id, post_id=post_id)
        if existing_like:
            await like_repo.delete(session, obj=existing_like)
            liked = False
        elif not await like_repo.add_once(session, like=Like(user_id=user_id, post_id=post_id)):
            # a concurrent request from the same user got there first
            logger.info(f"Duplicate like on post {post_id} by {user_id} ignored")
            liked = True
        else:
            liked = True
            liker = await user_repo.get(session, user_id)
            await notification_service.create_notification(
                session,
                recipient_id=post.author_id,
                sender_id=user_id,
                notification_type=NotificationType.LIKE,
                content=f"{liker.username} liked {_excerpt(post.content)}",
                reference_id=post.id,
            )

        return LikeToggleResponse(liked=liked, like_count=await like_repo.count_for(session, post_id=post_id))

    async def toggle_comment_like(
        self, session: AsyncSession, *, comment_id: str, user_id: str
    ) -> LikeToggleResponse:
        if not await comment_repo.get(session, comment_id):
            raise CommentNotFound()

        existing_like = await like_repo.find(session, user_id=user_id, comment_id=comment_id)
        if existing_like:
            await like_repo.delete(session, obj=existing_like)
            liked = False
        else:
            await like_repo.add_once(session, like=Like(user_id=user_id, comment_id=comment_id))
            liked = True

        return LikeToggleResponse(liked=liked, like_count=await like_repo.count_for(session, comment_id=comment_id))

post_service = PostService()
