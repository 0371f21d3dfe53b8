import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from buzzly.core.auth import generate_passwd_hash
from buzzly.core.config import settings
from buzzly.db.models import User, UserRole
from buzzly.db.repositories.user_repo import user_repo
from buzzly.db.session import create_tables, dispose_engine, get_async_session_maker

logger = logging.getLogger(__name__)


async def seed_admin(session: AsyncSession, *, email: str, username: str, password: str) -> User:
    """Create the moderator account, or promote an existing user with that email."""
    user = await user_repo.get_by_email(session, email=email)
    if user:
        if user.role != UserRole.ADMIN:
            user.role = UserRole.ADMIN
            user.is_blocked = False
            session.add(user)
            await session.commit()
            await session.refresh(user)
            logger.info(f"Promoted {email} to admin")
        return user

    admin = User(
        email=email,
        username=username,
        hashed_password=generate_passwd_hash(password),
        role=UserRole.ADMIN,
    )
    admin = await user_repo.create(session, obj_in=admin)
    logger.info(f"Created admin {username} ({email})")
    return admin


async def seed_all(email: Optional[str] = None, password: Optional[str] = None):
    """Seed the configured database with the first moderator account."""
    email = email or settings.SEED_ADMIN_EMAIL
    password = password or settings.SEED_ADMIN_PASSWORD
    if not email or not password:
        raise SystemExit("Set SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD to seed the admin account")

    try:
        await create_tables()
        async with get_async_session_maker()() as session:
            await seed_admin(session, email=email, username=settings.SEED_ADMIN_USERNAME, password=password)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_all())
