# buzzly/api/routers/comments.py
from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.db.session import get_session
from buzzly.core.auth import get_current_user
from buzzly.schemas.auth import TokenUser
from buzzly.schemas.post import CommentCreate, CommentPublic
from buzzly.services.post_service import post_service
from buzzly.api.deps import pagination_params

router = APIRouter()

@router.post("", response_model=CommentPublic, status_code=status.HTTP_201_CREATED)
async def create_comment(
    *,
    session: AsyncSession = Depends(get_session),
    post_id: str,
    comment_in: CommentCreate,
    current_user: TokenUser = Depends(get_current_user)
):
    """
    Comment on a post. The post author is notified unless they wrote the comment.
    """
    return await post_service.add_comment(
        session, post_id=post_id, author_id=current_user.id, content=comment_in.content
    )


@router.get("", response_model=List[CommentPublic])
async def get_comments_for_post(
    *,
    session: AsyncSession = Depends(get_session),
    post_id: str,
    pagination: pagination_params = Depends(),
    current_user: TokenUser = Depends(get_current_user)
):
    return await post_service.list_comments(
        session, post_id=post_id, skip=pagination.skip, limit=pagination.limit
    )
