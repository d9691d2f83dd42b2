"""
Async engine and request-scoped sessions for the marketplace database.

The feed only reads. Tables and migrations belong to the marketplace API;
``init_db`` exists for local development against an empty database.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from activity_feed.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_recycle=settings.db_pool_recycle_seconds,
    pool_pre_ping=True,
)

# Nothing is written, so loaded rows never need refreshing or flushing
feed_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per feed request; the generators share it."""
    async with feed_session_maker() as session:
        yield session


async def init_db() -> None:
    """Create missing tables. Development only."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
