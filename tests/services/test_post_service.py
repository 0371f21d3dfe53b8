# tests/services/test_post_service.py
import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import func, select

from buzzly.db.models import Comment, Like, Notification, NotificationType
from buzzly.db.repositories.post_repo import comment_repo, like_repo
from buzzly.services.post_service import post_service


async def _count(session, statement) -> int:
    return (await session.execute(statement)).scalar_one()


def _stale_find(monkeypatch):
    """Every lookup misses, as it does for a request that read before a concurrent like committed."""
    async def find(session, **kwargs):
        return None

    monkeypatch.setattr(like_repo, "find", find)


async def test_second_like_from_a_racing_request_is_not_duplicated(db_session, make_post, author, member, monkeypatch):
    post = await make_post(author, content="hello")
    # a failed insert rolls the session back and expires loaded objects
    post_id, author_id, member_id = post.id, author.id, member.id

    first = await post_service.toggle_post_like(db_session, post_id=post_id, user_id=member_id)
    _stale_find(monkeypatch)
    second = await post_service.toggle_post_like(db_session, post_id=post_id, user_id=member_id)

    assert first.liked is True
    assert second.liked is True
    assert second.like_count == 1
    assert await _count(db_session, select(func.count()).select_from(Like).where(Like.post_id == post_id)) == 1
    notifications = await _count(
        db_session,
        select(func.count()).select_from(Notification).where(
            Notification.recipient_id == author_id,
            Notification.notification_type == NotificationType.LIKE,
        ),
    )
    assert notifications == 1


async def test_racing_comment_likes_count_once(db_session, make_post, author, member, monkeypatch):
    post = await make_post(author)
    comment = await comment_repo.create(db_session, obj_in=Comment(content="nice", author_id=author.id, post_id=post.id))
    comment_id, member_id = comment.id, member.id

    await post_service.toggle_comment_like(db_session, comment_id=comment_id, user_id=member_id)
    _stale_find(monkeypatch)
    second = await post_service.toggle_comment_like(db_session, comment_id=comment_id, user_id=member_id)

    assert second.liked is True
    assert second.like_count == 1


async def test_like_table_rejects_duplicate_rows(db_session, make_post, author, member):
    post = await make_post(author)
    db_session.add(Like(user_id=member.id, post_id=post.id))
    await db_session.commit()

    db_session.add(Like(user_id=member.id, post_id=post.id))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


async def test_one_user_may_like_a_post_and_its_comments(db_session, make_post, author, member):
    post = await make_post(author)
    comments = [
        await comment_repo.create(db_session, obj_in=Comment(content=text, author_id=author.id, post_id=post.id))
        for text in ("first", "second")
    ]
    post_id, member_id = post.id, member.id
    first_id, second_id = (comment.id for comment in comments)

    assert await like_repo.add_once(db_session, like=Like(user_id=member_id, post_id=post_id))
    for comment_id in (first_id, second_id):
        assert await like_repo.add_once(db_session, like=Like(user_id=member_id, comment_id=comment_id))
    assert not await like_repo.add_once(db_session, like=Like(user_id=member_id, comment_id=first_id))

    assert await like_repo.count_for(db_session, post_id=post_id) == 1
    assert await like_repo.count_for(db_session, comment_id=first_id) == 1
    assert await like_repo.count_for(db_session, comment_id=second_id) == 1
