from typing import List
from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.core.auth import get_current_user
from buzzly.core.config import settings
from buzzly.db.session import get_session
from buzzly.db.repositories.user_repo import user_repo, follow_repo
from buzzly.errors import InvalidArgument
from buzzly.schemas.auth import TokenUser, UserPublic, UserRead
from buzzly.schemas.user import FollowResponse, UserProfile, UserUpdateModel
from buzzly.services.media_service import media_service
from buzzly.services.user_service import user_service

router = APIRouter()


@router.get("/search", response_model=List[UserPublic])
async def search_users(
    q: str = Query("", max_length=100),
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Case-insensitive substring search over usernames and emails.
    """
    if not q.strip():
        return []
    return await user_repo.search(session, query=q.strip())


@router.patch("/me", response_model=UserRead)
async def update_my_profile(
    data: UserUpdateModel,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    return await user_service.update_profile(session, user_id=current_user.id, data=data)


@router.post("/me/profile-picture", response_model=UserRead)
async def upload_profile_picture(
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Upload a new profile picture to the media bucket and store its URL.
    """
    if file.size is not None and file.size > settings.MAX_PROFILE_PICTURE_BYTES:
        raise InvalidArgument(message="Profile picture is too large")

    url = await media_service.upload_profile_picture(file.file, file.content_type, current_user.id)
    return await user_service.set_profile_picture(session, user_id=current_user.id, url=url)


@router.get("/{user_id}", response_model=UserProfile)
async def read_user_by_id(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Get a specific user's public profile by ID.
    """
    return await user_service.get_profile(session, user_id)


@router.post("/{user_id}/follow", response_model=FollowResponse)
async def toggle_follow(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Follow the user, or unfollow them if already followed.
    """
    following = await user_service.toggle_follow(session, follower_id=current_user.id, followed_id=user_id)
    user = await user_service.get_user(session, user_id)
    return FollowResponse(
        following=following,
        follower_count=await follow_repo.count_followers(session, user_id=user_id),
        user=UserPublic.model_validate(user),
    )


@router.get("/{user_id}/followers", response_model=List[UserPublic])
async def list_followers(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    return await user_service.list_connections(session, user_id=user_id, followers=True)


@router.get("/{user_id}/following", response_model=List[UserPublic])
async def list_following(
    user_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    return await user_service.list_connections(session, user_id=user_id, followers=False)
