# tests/test_seeds.py
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel import select

from buzzly.core.auth import verify_password
from buzzly.core.config import settings
from buzzly.db import session as session_module
from buzzly.db.models import User, UserRole
from seeds.seed_data import seed_admin, seed_all


@pytest.mark.asyncio
async def test_seed_admin_creates_moderator(db_session: AsyncSession):
    admin = await seed_admin(db_session, email="mod@buzzly.io", username="mod", password="s3cretpass")

    assert admin.role == UserRole.ADMIN
    assert admin.is_moderator
    assert verify_password("s3cretpass", admin.hashed_password)


@pytest.mark.asyncio
async def test_seed_admin_promotes_existing_user(db_session: AsyncSession, make_user):
    user = await make_user("regular", is_blocked=True)

    admin = await seed_admin(db_session, email=user.email, username="ignored", password="whatever1")

    assert admin.id == user.id
    assert admin.username == "regular"
    assert admin.role == UserRole.ADMIN
    assert admin.is_blocked is False


@pytest.mark.asyncio
async def test_seed_all_uses_one_engine_and_disposes_it(tmp_path, monkeypatch):
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}"
    monkeypatch.setattr(settings, "DATABASE_URL_ASYNC", database_url)
    monkeypatch.setattr(session_module, "_async_engine", None)
    monkeypatch.setattr(session_module, "_async_session_maker", None)
    created = []
    real_create_engine = session_module._create_engine

    def counting_create_engine():
        engine = real_create_engine()
        created.append(engine)
        return engine

    monkeypatch.setattr(session_module, "_create_engine", counting_create_engine)

    await seed_all(email="first@buzzly.io", password="s3cretpass")

    assert len(created) == 1
    assert session_module._async_engine is None
    assert session_module._async_session_maker is None

    engine = create_async_engine(database_url)
    async with AsyncSession(engine) as session:
        admin = (await session.execute(select(User).where(User.email == "first@buzzly.io"))).scalar_one()
        assert admin.role == UserRole.ADMIN
    await engine.dispose()


@pytest.mark.asyncio
async def test_seed_all_requires_credentials(monkeypatch):
    monkeypatch.setattr(settings, "SEED_ADMIN_EMAIL", None)
    monkeypatch.setattr(settings, "SEED_ADMIN_PASSWORD", None)

    with pytest.raises(SystemExit):
        await seed_all()
