"""Async SQLAlchemy engine and session plumbing."""
from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from snippet_manager.config import settings

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, pool_pre_ping=True)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request."""
    async with async_session_factory() as session:
        yield session


async def create_tables() -> None:
    """Create any missing tables (no migrations)."""
    from snippet_manager.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
