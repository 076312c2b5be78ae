"""
Authentication Service Package

This package provides the Authentication Service for SongTrackPro. It exports
the FastAPI application instance for use with ASGI servers like Uvicorn.

The package structure:
    - main.py: FastAPI application entrypoint
    - api/: API layer with endpoints and models
    - database/: User, refresh token and linked account persistence
    - services/: Business logic layer

Usage:
    ```python
    from services.auth_service import app

    # Run with uvicorn
    # uvicorn services.auth_service:app --port 3001
    ```

Exports:
    app: FastAPI application instance configured for authentication service
    create_auth_app: Factory used by tests to build isolated instances
"""

from services.auth_service.main import app, create_auth_app

__all__ = ["app", "create_auth_app"]
