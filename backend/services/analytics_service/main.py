"""
Analytics Service - FastAPI Application Entry Point

This module serves as the main entry point for the Analytics Service, which
owns promotion campaigns and combines the Meta and Spotify metric snapshots
into per-day performance summaries.

The service provides RESTful APIs for:
    - Campaign creation, listing and status transitions
    - Campaign summaries (daily snapshots, totals and derived ratios)

Deployment:
    The service runs on port 3004 and is served behind the API gateway at the
    /analytics prefix. The root_path parameter ensures proper URL generation in
    OpenAPI documentation outside DEV.

Example:
    To run the service locally:
        ```bash
        uvicorn services.analytics_service:app --port 3004 --reload
        ```

See Also:
    - services.analytics_service.api.v1.api: API router configuration
    - common.fastapi.create_fastapi_app: FastAPI app factory
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from common.config import AnalyticsServiceSettings
from common.database import dispose_engines
from common.database.metric_store import close_mongo_clients
from common.fastapi import create_fastapi_app
from services.analytics_service.api.dependencies import SERVICE_NAME
from services.analytics_service.api.v1.api import api_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await close_mongo_clients()
    await dispose_engines()


def create_analytics_app(settings: Optional[AnalyticsServiceSettings] = None) -> FastAPI:
    return create_fastapi_app(
        service_name=SERVICE_NAME,
        description="Campaign analytics service for SongTrackPro",
        api_router=api_router,
        root_path="/analytics",
        lifespan=lifespan,
        settings=settings or AnalyticsServiceSettings(),
    )


app = create_analytics_app()
