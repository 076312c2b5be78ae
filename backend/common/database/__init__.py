"""
Common database utilities and session management.

Two stores back the services:

    - Relational store (PostgreSQL via SQLAlchemy async): users, refresh
      tokens, linked platform accounts and campaigns.
    - Metric store (MongoDB via PyMongo's async client): daily Meta ad and
      Spotify snapshots, validated by `$jsonSchema`.

Main Components:
    - Base: SQLAlchemy declarative base class for all ORM models
    - session: Relational connection and session management
    - metric_store: Metric collections, validators, indexes and repository

Usage:
    ```python
    from common.database import get_async_db_session

    async with get_async_db_session("analytics-service") as session:
        result = await session.execute(select(Campaign))
        campaigns = result.scalars().all()
    ```
"""

from .base import Base
from .session import (
    create_sqlalchemy_url,
    create_tables,
    dispose_engines,
    get_async_db_session,
    get_async_engine,
    get_async_session_maker,
)

__all__ = [
    "Base",
    "create_sqlalchemy_url",
    "create_tables",
    "dispose_engines",
    "get_async_db_session",
    "get_async_engine",
    "get_async_session_maker",
]
