# buzzly/api/routers/likes.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.db.session import get_session
from buzzly.core.auth import get_current_user
from buzzly.schemas.auth import TokenUser
from buzzly.schemas.post import LikeToggleResponse
from buzzly.services.post_service import post_service

router = APIRouter()

@router.post("/post/{post_id}", response_model=LikeToggleResponse)
async def toggle_like_post(
    post_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user)
):
    return await post_service.toggle_post_like(session, post_id=post_id, user_id=current_user.id)


@router.post("/comment/{comment_id}", response_model=LikeToggleResponse)
async def toggle_like_comment(
    comment_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user)
):
    return await post_service.toggle_comment_like(session, comment_id=comment_id, user_id=current_user.id)
