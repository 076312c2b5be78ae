"""
Common FastAPI utilities and middleware.

This module provides shared FastAPI functionality used by the gateway and all
domain services, including the application factory and common middleware.

Main Components:
    - app_factory: FastAPI application factory with standard configuration
    - middleware: Security headers middleware

Usage:
    ```python
    from common.fastapi import create_fastapi_app
    from fastapi import APIRouter

    api_router = APIRouter()

    app = create_fastapi_app(
        service_name="meta-service",
        description="Meta Ads metric ingestion",
        api_router=api_router
    )
    ```
"""
from .app_factory import create_fastapi_app, utc_timestamp
from .middleware import SecurityHeadersMiddleware

__all__ = ["SecurityHeadersMiddleware", "create_fastapi_app", "utc_timestamp"]
