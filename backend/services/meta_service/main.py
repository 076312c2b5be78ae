"""
Meta Ads Service - FastAPI Application Entrypoint

Stores and serves daily Meta ad delivery snapshots (impressions, clicks, spend,
conversions) in the `metaAdMetrics` collection of the metric store. Campaign
ownership is checked against the relational store.

On startup the metric collections are created (or their validators updated)
together with their indexes; on shutdown the MongoDB clients and database
engines are closed.

Example:
    ```bash
    uvicorn services.meta_service:app --port 3002 --reload
    ```

    Through the gateway the API is served under http://localhost:3000/meta/api/v1.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from common.config import MetaServiceSettings
from common.database import dispose_engines
from common.database.metric_store import (
    close_mongo_clients,
    get_metric_database,
    init_metric_collections,
)
from common.fastapi import create_fastapi_app
from services.meta_service.api.dependencies import SERVICE_NAME
from services.meta_service.api.v1.api import api_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_metric_collections(get_metric_database(SERVICE_NAME))
    yield
    await close_mongo_clients()
    await dispose_engines()


def create_meta_app(
    settings: Optional[MetaServiceSettings] = None, init_store: bool = True
) -> FastAPI:
    """
    Build the Meta Ads service.

    Args:
        settings: Service settings; loaded from the environment when omitted.
        init_store: Initialize the metric collections on startup. Tests that
            replace the metric service disable it.
    """
    return create_fastapi_app(
        service_name=SERVICE_NAME,
        description="Meta Ads metrics service for SongTrackPro",
        api_router=api_router,
        root_path="/meta",
        lifespan=lifespan if init_store else None,
        settings=settings or MetaServiceSettings(),
    )


app = create_meta_app()
