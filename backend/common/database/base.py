"""
Base declarative class for all ORM models.

This module provides the base SQLAlchemy declarative class that all relational
models inherit from. It includes common fields (created_at, updated_at) and
automatic table name generation.

Features:
    - Automatic timestamp tracking (created_at, updated_at)
    - Automatic snake_case table name generation from class name
    - Timezone-aware timestamps
    - Server-side default values for timestamps

Usage:
    ```python
    from common.database import Base
    from sqlalchemy.orm import Mapped, mapped_column
    from sqlalchemy import String

    class SpotifyAccount(Base):
        id: Mapped[str] = mapped_column(String(36), primary_key=True)
        artist_name: Mapped[str] = mapped_column(String(255))

        # table name "spotify_account"; created_at and updated_at included
    ```
"""

from __future__ import annotations

from datetime import datetime
import re

from sqlalchemy import TIMESTAMP, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Base(DeclarativeBase):
    """
    Base declarative class for all SQLAlchemy ORM models.

    Attributes:
        created_at (Mapped[datetime]): Timestamp when the record was created.
            Set by the database server.
        updated_at (Mapped[datetime]): Timestamp when the record was last updated.
            Set by the database server and refreshed on every ORM update.

    Table Naming:
        Table names are generated from the class name in snake_case:
        - Campaign -> "campaign"
        - MetaAdAccount -> "meta_ad_account"
        Models may still set `__tablename__` explicitly.

    Note:
        - Timestamps are timezone-aware (TIMESTAMP WITH TIME ZONE)
        - func.now() renders as NOW() on PostgreSQL and CURRENT_TIMESTAMP elsewhere
    """

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        """Generate a snake_case table name from the class name."""
        return _CAMEL_BOUNDARY.sub("_", cls.__name__).lower()
