"""
Spotify Service - FastAPI Application Entrypoint

Stores and serves daily Spotify for Artists snapshots (streams, listeners,
saves) in the `spotifyMetrics` collection.

Example:
    ```bash
    uvicorn services.spotify_service:app --port 3003 --reload
    ```
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from common.config import SpotifyServiceSettings
from common.database import dispose_engines
from common.database.metric_store import (
    close_mongo_clients,
    get_metric_database,
    init_metric_collections,
)
from common.fastapi import create_fastapi_app
from services.spotify_service.api.dependencies import SERVICE_NAME
from services.spotify_service.api.v1.api import api_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_metric_collections(get_metric_database(SERVICE_NAME))
    yield
    await close_mongo_clients()
    await dispose_engines()


def create_spotify_app(
    settings: Optional[SpotifyServiceSettings] = None, init_store: bool = True
) -> FastAPI:
    return create_fastapi_app(
        service_name=SERVICE_NAME,
        description="Spotify metrics service for SongTrackPro",
        api_router=api_router,
        root_path="/spotify",
        lifespan=lifespan if init_store else None,
        settings=settings or SpotifyServiceSettings(),
    )


app = create_spotify_app()
