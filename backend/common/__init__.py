"""
Common utilities and shared code for the SongTrackPro backend services.

This package provides functionality shared by the API gateway and the domain
services (auth, meta, spotify, analytics). It includes:

Modules:
    - config: Centralized configuration management with environment-based settings
    - database: Relational sessions, the campaign repository and the MongoDB metric store
    - exceptions: Standardized error handling and API error responses
    - fastapi: FastAPI application factory with common middleware and configuration
    - logging: Centralized logging configuration using loguru
    - models: SQLAlchemy ORM models and metric snapshot documents
    - rate_limit: Tiered, authentication and global request limits
    - security: Password hashing, JWT issuing and bearer-token dependencies
    - metric_service: Snapshot ingestion shared by the Meta and Spotify services
    - client: Gateway client with automatic token refresh

Usage:
    Import specific modules as needed:

    ```python
    from common.config import get_settings
    from common.database import get_async_db_session
    from common.logging import setup_logging
    from common.exceptions import APIError
    ```
"""

__version__ = "1.0.0"
