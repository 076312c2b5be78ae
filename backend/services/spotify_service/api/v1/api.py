"""
API Router Aggregation for the Spotify Service v1
"""

from fastapi import APIRouter, Depends

from services.spotify_service.api.dependencies import rate_limiter
from services.spotify_service.api.v1.endpoints import metrics

api_router = APIRouter(dependencies=[Depends(rate_limiter)])

api_router.include_router(metrics.router, tags=["spotify-metrics"])
