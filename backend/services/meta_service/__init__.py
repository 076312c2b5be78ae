"""
Meta Ads Service Package

Exports:
    app: FastAPI application instance for the Meta Ads metrics service
    create_meta_app: Factory used by tests to build isolated instances
"""

from services.meta_service.main import app, create_meta_app

__all__ = ["app", "create_meta_app"]
