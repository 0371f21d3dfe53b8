# buzzly/api/routers/admin.py
from fastapi import APIRouter, Depends, Query
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.db.session import get_session
from buzzly.core.auth import require_admin
from buzzly.schemas.auth import TokenUser, UserRead
from buzzly.schemas.user import AdminStats, BlockToggleResponse, ExcessivePoster, FollowerStats
from buzzly.services.admin_service import admin_service
from buzzly.services.user_service import user_service

router = APIRouter()

@router.get("/users/search", response_model=List[UserRead])
async def search_users(
    q: str = Query("", max_length=100),
    session: AsyncSession = Depends(get_session),
    current_admin: TokenUser = Depends(require_admin)
):
    """
    (Admin) Search users by username or email. With no query, the 20 newest users.
    """
    return await admin_service.search_users(session, query=q)


@router.patch("/users/{user_id}/toggle-block", response_model=BlockToggleResponse)
async def toggle_block_user(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    current_admin: TokenUser = Depends(require_admin)
):
    """
    (Admin) Block or unblock a user. Admin accounts cannot be blocked.
    """
    user = await user_service.toggle_block(session, user_id=user_id)
    return BlockToggleResponse(
        user_id=user.id,
        blocked=user.is_blocked,
        message=f"User {'blocked' if user.is_blocked else 'unblocked'} successfully",
    )


@router.get("/stats", response_model=AdminStats)
async def get_stats(
    session: AsyncSession = Depends(get_session),
    current_admin: TokenUser = Depends(require_admin)
):
    """
    (Admin) Platform totals, including the number of reports awaiting review.
    """
    return await admin_service.stats(session)


@router.get("/follower-stats", response_model=FollowerStats)
async def get_follower_stats(
    session: AsyncSession = Depends(get_session),
    current_admin: TokenUser = Depends(require_admin)
):
    return await admin_service.follower_stats(session)


@router.get("/excessive-posters", response_model=List[ExcessivePoster])
async def get_excessive_posters(
    session: AsyncSession = Depends(get_session),
    current_admin: TokenUser = Depends(require_admin)
):
    """
    (Admin) Users posting more than the daily threshold today.
    """
    return await admin_service.excessive_posters(session)
