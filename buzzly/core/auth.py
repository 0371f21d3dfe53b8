# buzzly/core/auth.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request, Depends
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from pydantic_settings import BaseSettings

from buzzly.schemas.auth import TokenUser
from buzzly.core.config import settings
from buzzly.db.models import User, UserRole
from buzzly.errors import UnAuthenticated, InvalidToken, InsufficientPermission


passwd_context = CryptContext(schemes=["bcrypt"])
logger = logging.getLogger(__name__)


class OptionalOAuth2Scheme(OAuth2PasswordBearer):
    async def __call__(self, request: Request) -> Optional[str]:
        try:
            return await super().__call__(request)
        except Exception:
            return None

optional_oauth2_scheme = OptionalOAuth2Scheme(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def generate_passwd_hash(password: str) -> str:
    return passwd_context.hash(password)


def verify_password(password: str, hash: str) -> bool:
    return passwd_context.verify(password, hash)


def decode_token(token: str, settings: BaseSettings) -> dict:
    """Decode and verify a token. Expiry and signature errors propagate to the caller."""
    return jwt.decode(token, key=settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    to_encode = {
        "sub": user.email,
        "id": str(user.id),
        "username": user.username,
        "role": UserRole(user.role).value,
        "exp": datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def get_current_user_dependency(settings: BaseSettings):
    def get_current_user(
        request: Request,
        token: Optional[str] = Depends(optional_oauth2_scheme),
    ) -> TokenUser:
        access_token = token or request.cookies.get("access_token")

        if not access_token:
            raise UnAuthenticated(
                message="You are not authenticated. Please login to continue"
            )

        try:
            payload = decode_token(access_token, settings)
        except jwt.ExpiredSignatureError:
            raise InvalidToken()
        except jwt.PyJWTError as e:
            logger.warning(f"Rejected access token: {e}")
            raise UnAuthenticated(message="Token is not valid")

        user_id = payload.get("id")
        if not user_id or not payload.get("sub"):
            raise UnAuthenticated(message="Token is missing the user identity")

        return TokenUser(
            id=user_id,
            email=payload.get("sub"),
            username=payload.get("username"),
            role=payload.get("role") or UserRole.GENERAL.value,
            access_token=access_token,
            token_type="bearer"
        )

    return get_current_user


get_current_user = get_current_user_dependency(settings=settings)


def require_admin(current_user: TokenUser = Depends(get_current_user)) -> TokenUser:
    """Dependency for moderator-only routes."""
    if not current_user.is_moderator:
        raise InsufficientPermission()
    return current_user
