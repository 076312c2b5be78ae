"""
Relational store session management with async support and connection pooling.

Users, refresh tokens, linked platform accounts and campaigns live in
PostgreSQL and are accessed through SQLAlchemy's async engine (asyncpg).

Key Features:
    - Connection pooling configured from DATABASE_POOL_SIZE / DATABASE_MAX_OVERFLOW
    - Engine caching so each service process opens one pool
    - Context manager for automatic commit, rollback and cleanup
    - Table creation helper used by scripts/init_db.py

Usage:
    ```python
    from common.database import get_async_db_session

    async with get_async_db_session("auth-service") as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
    ```
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from loguru import logger
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from common.config import BaseServiceSettings, get_settings
from common.database.base import Base

# Engine cache so each service process opens a single pool
_async_engines: dict[str, AsyncEngine] = {}


def create_sqlalchemy_url(settings: BaseServiceSettings | None = None) -> URL:
    """
    Create the asyncpg SQLAlchemy URL from the POSTGRES_* settings.

    Args:
        settings: Settings to read; the base settings are loaded if omitted.

    Returns:
        URL with driver "postgresql+asyncpg".
    """
    settings = settings or get_settings()
    return URL.create(
        drivername="postgresql+asyncpg",
        username=settings.POSTGRES_USER,
        password=settings.POSTGRES_PASSWORD,
        host=settings.POSTGRES_HOST,
        port=settings.POSTGRES_PORT,
        database=settings.POSTGRES_DB,
    )


def get_async_engine(service_name: str | None = None) -> AsyncEngine:
    """
    Get cached async database engine with connection pooling.

    Args:
        service_name: Name of the service, used to load its settings and as the
            PostgreSQL application_name.

    Returns:
        SQLAlchemy AsyncEngine instance
    """
    cache_key = service_name or "default"
    if cache_key in _async_engines:
        return _async_engines[cache_key]

    settings = get_settings(service_name)
    url = create_sqlalchemy_url(settings)

    async_engine = create_async_engine(
        url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_recycle=3600,
        pool_pre_ping=True,
        echo=settings.DEBUG,
        connect_args={
            "server_settings": {
                "application_name": service_name or "songtrackpro",
                "jit": "off",
            }
        },
    )

    logger.info(
        f"Created async database engine for {service_name or 'default'} with "
        f"pool_size={settings.DATABASE_POOL_SIZE}, max_overflow={settings.DATABASE_MAX_OVERFLOW}"
    )
    _async_engines[cache_key] = async_engine
    return async_engine


@lru_cache(maxsize=10)
def get_async_session_maker(service_name: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Get cached async session maker for a service."""
    return async_sessionmaker(
        bind=get_async_engine(service_name),
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@asynccontextmanager
async def get_async_db_session(service_name: str | None = None) -> AsyncIterator[AsyncSession]:
    """
    Async context manager for database sessions with automatic cleanup.

    Args:
        service_name: Optional name of the service whose engine to use.

    Yields:
        AsyncSession ready for database operations.

    Note:
        - Sessions automatically commit on successful exit
        - Sessions automatically rollback on exceptions
        - Sessions are automatically closed when exiting the context
    """
    session = get_async_session_maker(service_name)()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.error(f"Async database session error: {e}")
        raise
    finally:
        await session.close()


async def create_tables(service_name: str | None = None) -> None:
    """Create every table registered on Base that does not exist yet."""
    # Registers the models on Base.metadata
    import common.models  # noqa: F401

    engine = get_async_engine(service_name)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    logger.info(f"Created relational tables: {', '.join(sorted(Base.metadata.tables))}")


async def dispose_engines() -> None:
    """Close the pooled connections of every cached engine."""
    for cache_key, engine in list(_async_engines.items()):
        await engine.dispose()
        logger.info(f"Disposed async database engine for {cache_key}")
    _async_engines.clear()
    get_async_session_maker.cache_clear()
