# tests/conftest.py
import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL_ASYNC", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "buzzly-tests.log"))

import pytest
from typing import AsyncGenerator, Callable
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from buzzly.main import app
from buzzly.core.auth import create_access_token, generate_passwd_hash
from buzzly.db.session import get_session
from buzzly.db.models import Post, User, UserRole

# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "strongpassword"

_hashed_password = generate_passwd_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
async def session_maker() -> AsyncGenerator[async_sessionmaker, None]:
    # A fresh in-memory database per test, shared by the test and the app through one connection
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(session_maker: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture(scope="function")
async def client(session_maker: async_sessionmaker, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_async_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    async def _make_user(username: str, role: UserRole = UserRole.GENERAL, is_blocked: bool = False) -> User:
        user = User(
            email=f"{username}@buzzly.io",
            username=username,
            hashed_password=_hashed_password,
            role=role,
            is_blocked=is_blocked,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_post(db_session: AsyncSession) -> Callable:
    async def _make_post(author: User, content: str = "Hello Buzzly", image: str | None = None) -> Post:
        post = Post(author_id=author.id, content=content, image=image)
        db_session.add(post)
        await db_session.commit()
        await db_session.refresh(post)
        return post

    return _make_post


@pytest.fixture
def auth_headers() -> Callable[[User], dict]:
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _auth_headers


@pytest.fixture
async def member(make_user) -> User:
    return await make_user("member")


@pytest.fixture
async def author(make_user) -> User:
    return await make_user("author")


@pytest.fixture
async def moderator(make_user) -> User:
    return await make_user("moderator", role=UserRole.ADMIN)
