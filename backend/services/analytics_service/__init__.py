"""
Analytics Service Package

This package provides the Analytics Service application for SongTrackPro. The
service exposes RESTful APIs for campaign management and campaign performance
summaries.

Package Structure:
    - main.py: FastAPI application entry point
    - api/: API endpoint definitions, models and routing
    - services/: Campaign lifecycle and summary business logic

Exports:
    app (FastAPI): The main FastAPI application instance
    create_analytics_app: Factory used by tests to build isolated instances

Usage:
    ```python
    from services.analytics_service import app

    # Run with uvicorn
    # uvicorn services.analytics_service:app --port 3004
    ```
"""

from services.analytics_service.main import app, create_analytics_app

__all__ = ["app", "create_analytics_app"]
