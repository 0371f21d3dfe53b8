import logging
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.core.auth import generate_passwd_hash, verify_password, create_access_token
from buzzly.db.models import User, Follow, UserRole, NotificationType
from buzzly.db.repositories.user_repo import user_repo, follow_repo
from buzzly.errors import (
    AccountBlocked,
    Forbidden,
    InvalidArgument,
    InvalidCredentials,
    UserAlreadyExists,
    UserNotFound,
)
from buzzly.schemas.auth import UserCreateModel, UserLoginModel, ChangePasswordModel
from buzzly.schemas.user import UserProfile, UserUpdateModel
from buzzly.services.notification_service import notification_service

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserService:
    async def get_user(self, session: AsyncSession, user_id: str) -> User:
        user = await user_repo.get(session, user_id)
        if not user:
            raise UserNotFound()
        return user

    async def create_user(self, session: AsyncSession, user_data: UserCreateModel) -> User:
        """Create a new user in the database."""
        if await user_repo.get_by_email(session, email=user_data.email):
            raise UserAlreadyExists(message="A user with this email already exists.")
        if await user_repo.get_by_username(session, username=user_data.username):
            raise UserAlreadyExists(message="This username is already taken.")

        new_user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=generate_passwd_hash(user_data.password),
            role=UserRole.GENERAL,
        )
        created_user = await user_repo.create(session, obj_in=new_user)
        logger.info(f"Created user {created_user.id}")
        return created_user

    async def authenticate(self, session: AsyncSession, login_data: UserLoginModel) -> tuple[User, str]:
        """Verify credentials and return the user with a fresh access token."""
        user = await user_repo.get_by_email(session, email=login_data.email)
        if not user or not verify_password(login_data.password, user.hashed_password):
            raise InvalidCredentials()
        if user.is_blocked:
            raise AccountBlocked()
        return user, create_access_token(user)

    async def change_password(self, session: AsyncSession, *, user_id: str, data: ChangePasswordModel) -> None:
        if not data.current_password or not data.new_password:
            raise InvalidArgument(message="All fields are required")
        if len(data.new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgument(message=f"New password must be at least {MIN_PASSWORD_LENGTH} characters")

        user = await self.get_user(session, user_id)
        if not verify_password(data.current_password, user.hashed_password):
            raise InvalidArgument(message="Current password is incorrect", error_code="incorrect_password")

        user.hashed_password = generate_passwd_hash(data.new_password)
        session.add(user)
        await session.commit()
        logger.info(f"Password changed for user {user_id}")

    async def get_profile(self, session: AsyncSession, user_id: str) -> UserProfile:
        user = await self.get_user(session, user_id)
        return UserProfile.model_validate(user).model_copy(
            update={
                "follower_count": await follow_repo.count_followers(session, user_id=user_id),
                "following_count": await follow_repo.count_following(session, user_id=user_id),
            }
        )

    async def update_profile(self, session: AsyncSession, *, user_id: str, data: UserUpdateModel) -> User:
        update_fields = data.model_dump(exclude_unset=True)
        if not update_fields:
            raise InvalidArgument(message="No fields to update")

        user = await self.get_user(session, user_id)
        for field, value in update_fields.items():
            setattr(user, field, value)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    async def set_profile_picture(self, session: AsyncSession, *, user_id: str, url: str) -> User:
        return await self.update_profile(session, user_id=user_id, data=UserUpdateModel(profile_picture=url))

    async def toggle_follow(self, session: AsyncSession, *, follower_id: str, followed_id: str) -> bool:
        """Follow or unfollow; returns True when the follower now follows the user."""
        if follower_id == followed_id:
            raise InvalidArgument(message="Cannot follow yourself")

        followed = await self.get_user(session, followed_id)
        follower = await self.get_user(session, follower_id)

        link = await follow_repo.get_link(session, follower_id=follower_id, followed_id=followed_id)
        if link:
            await follow_repo.delete(session, obj=link)
            logger.info(f"User {follower_id} unfollowed {followed_id}")
            return False

        await follow_repo.create(session, obj_in=Follow(follower_id=follower_id, followed_id=followed.id))
        await notification_service.create_notification(
            session,
            recipient_id=followed.id,
            sender_id=follower_id,
            notification_type=NotificationType.FOLLOW,
            content=f"{follower.username} started following you.",
        )
        logger.info(f"User {follower_id} followed {followed_id}")
        return True

    async def toggle_block(self, session: AsyncSession, *, user_id: str) -> User:
        user = await self.get_user(session, user_id)
        if user.role == UserRole.ADMIN:
            raise Forbidden(message="Cannot block an admin user")

        user.is_blocked = not user.is_blocked
        session.add(user)
        await session.commit()
        await session.refresh(user)
        logger.info(f"User {user_id} {'blocked' if user.is_blocked else 'unblocked'}")
        return user

    async def list_connections(self, session: AsyncSession, *, user_id: str, followers: bool) -> list[User]:
        await self.get_user(session, user_id)
        if followers:
            ids = await follow_repo.follower_ids(session, user_id=user_id)
        else:
            ids = await follow_repo.following_ids(session, user_id=user_id)
        users = await user_repo.get_many(session, ids=set(ids))
        return sorted(users.values(), key=lambda u: u.username.lower())

user_service = UserService()
