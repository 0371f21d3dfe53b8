from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.core.auth import create_access_token, get_current_user
from buzzly.core.config import settings
from buzzly.db.session import get_session
from buzzly.schemas.auth import (
    AuthResponseModel,
    ChangePasswordModel,
    MessageResponseModel,
    TokenUser,
    UserCreateModel,
    UserLoginModel,
    UserRead,
)
from buzzly.services.user_service import user_service

router = APIRouter()


def _set_auth_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="none",
        secure=True,
    )


# ==============================
# USER REGISTRATION ENDPOINT
# ==============================
@router.post("/register", response_model=AuthResponseModel, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_in: UserCreateModel,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """
    Register a new user and sign them in.

    Email and username must both be unused. The response carries the access
    token and also sets it as an `access_token` cookie.
    """
    created_user = await user_service.create_user(session, user_in)
    access_token = create_access_token(created_user)
    _set_auth_cookie(response, access_token)

    return AuthResponseModel(
        status=True,
        message="User created successfully",
        access_token=access_token,
        data=UserRead.model_validate(created_user),
    )


# ==============================
# USER LOGIN ENDPOINT
# ==============================
@router.post("/login", response_model=AuthResponseModel)
async def login_for_access_token(
    form_data: UserLoginModel,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """
    Authenticate a user and provide an access token.

    Blocked accounts are refused even with the right password.
    """
    user, access_token = await user_service.authenticate(session, form_data)
    _set_auth_cookie(response, access_token)

    return AuthResponseModel(
        status=True,
        message="User successfully logged in",
        access_token=access_token,
        data=UserRead.model_validate(user),
    )


@router.get("/me", response_model=UserRead)
async def read_current_user(
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    """
    Get the signed-in user's account.
    """
    return await user_service.get_user(session, current_user.id)


@router.post("/change-password", response_model=MessageResponseModel)
async def change_password(
    data: ChangePasswordModel,
    session: AsyncSession = Depends(get_session),
    current_user: TokenUser = Depends(get_current_user),
):
    await user_service.change_password(session, user_id=current_user.id, data=data)
    return MessageResponseModel(status=True, message="Password changed successfully")
