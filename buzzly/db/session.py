import logging
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from buzzly.core.config import settings

logger = logging.getLogger(__name__)


_async_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def _create_engine() -> AsyncEngine:
    database_url = settings.DATABASE_URL_ASYNC
    if database_url.startswith("sqlite"):
        # SQLite manages its own pool
        return create_async_engine(database_url, echo=settings.DATABASE_ECHO)
    return create_async_engine(
        database_url,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=900,
        pool_timeout=30,
    )


def _session_maker_for(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; report reads that must see other writers use populate_existing.
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


def get_async_engine() -> AsyncEngine:
    """Get or create the shared engine on first use."""
    global _async_engine
    if _async_engine is None:
        _async_engine = _create_engine()
        logger.info("✅ Async engine created")
    return _async_engine


def get_async_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get or create the shared session maker."""
    global _async_session_maker
    if _async_session_maker is None:
        _async_session_maker = _session_maker_for(get_async_engine())
        logger.info("✅ Async session maker created")
    return _async_session_maker


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_async_session_maker()() as session:
        yield session


async def create_tables():
    """Create any missing tables."""
    try:
        async with get_async_engine().begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
    except Exception as e:
        logger.error(f"❌ Failed to create tables: {e}")
        raise
    logger.info("✅ Database tables created/verified")


async def dispose_engine():
    global _async_engine, _async_session_maker
    if _async_engine is not None:
        await _async_engine.dispose()
        logger.info("Async engine disposed")
    _async_engine = None
    _async_session_maker = None
