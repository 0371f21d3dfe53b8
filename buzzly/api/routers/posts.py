# buzzly/api/routers/posts.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from buzzly.core.auth import get_current_user
from buzzly.db.session import get_session
from buzzly.schemas.auth import TokenUser
from buzzly.schemas.post import PostCreate, PostDetail, PostPublic
from buzzly.api.deps import pagination_params
from buzzly.services.post_service import post_service

router = APIRouter()


@router.get("", response_model=List[PostPublic])
async def read_feed(
    *,
    session: AsyncSession = Depends(get_session),
    pagination: pagination_params = Depends(),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Retrieve the signed-in user's feed: their own posts and the posts of
    everyone they follow, newest first.
    """
    return await post_service.feed(session, user_id=current_user.id, limit=pagination.limit)


@router.post("", response_model=PostPublic, status_code=status.HTTP_201_CREATED)
async def create_post(
    *,
    session: AsyncSession = Depends(get_session),
    post_in: PostCreate,
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Create a new post. Either `content` or `image` must be given.
    """
    return await post_service.create_post(session, author_id=current_user.id, data=post_in)


@router.get("/user/{user_id}", response_model=List[PostPublic])
async def read_user_posts(
    *,
    user_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    return await post_service.posts_by_user(session, user_id=user_id)


@router.get("/{post_id}", response_model=PostDetail)
async def read_post(
    *,
    post_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Get a single post by its ID, including author info and comments.
    """
    return await post_service.get_post(session, post_id=post_id)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    *,
    session: AsyncSession = Depends(get_session),
    post_id: str,
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Delete a post. Only the post author or an admin can delete.
    """
    await post_service.delete_post(
        session, post_id=post_id, actor_id=current_user.id, actor_is_moderator=current_user.is_moderator
    )
