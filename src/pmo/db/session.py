"""Async SQLAlchemy engine and session handling."""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pmo.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.pmo_debug,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """One unit of work: commit on success, roll back and re-raise on error.

    Used by background jobs and scripts that run outside a request.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields a request-scoped session."""
    async with session_scope() as session:
        yield session


async def init_db() -> None:
    """Check the database on startup; create missing tables when configured."""
    async with engine.begin() as conn:
        if settings.db_create_tables:
            from pmo.models.db import Base

            await conn.run_sync(Base.metadata.create_all)
        else:
            await conn.run_sync(lambda _: None)


async def close_db() -> None:
    await engine.dispose()
