"""
Database Module
===============
Async engine and session factory for the SQLAlchemy code store.
"""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import (
    create_async_engine as sa_create_async_engine,
    AsyncSession,
    async_sessionmaker,
    AsyncEngine,
)
from sqlalchemy.orm import DeclarativeBase

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


def create_async_engine(
    database_url: str,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_pre_ping: bool = True,
    echo: bool = False,
) -> AsyncEngine:
    """
    Create and configure an async database engine.

    Args:
        database_url: Async connection string (postgresql+asyncpg://..., sqlite+aiosqlite://...)
        pool_size: Connection pool size (ignored for SQLite)
        max_overflow: Max overflow connections (ignored for SQLite)
        pool_pre_ping: Enable connection health checks
        echo: Log SQL statements

    Returns:
        Configured AsyncEngine instance
    """
    options = {"pool_pre_ping": pool_pre_ping, "echo": echo}
    if not database_url.startswith("sqlite"):
        options.update(pool_size=pool_size, max_overflow=max_overflow)

    engine = sa_create_async_engine(database_url, **options)
    logger.info("Database engine initialized", dialect=engine.dialect.name)
    return engine


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Build the session factory used by the code store."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables registered on ``Base`` (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: Optional[AsyncEngine]) -> None:
    """Close all pooled connections."""
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
