"""
Spotify Service Package

Exports:
    app: FastAPI application instance for the Spotify metrics service
    create_spotify_app: Factory used by tests to build isolated instances
"""

from services.spotify_service.main import app, create_spotify_app

__all__ = ["app", "create_spotify_app"]
