"""
Spotify track metric endpoints.

Endpoints:
    POST /metrics
        Store one daily snapshot of a track (201). `streams` is required,
        `listeners` and `saves` are optional.

    GET /campaigns/{campaign_id}/metrics
        The campaign's snapshots ordered by date descending.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from common.metric_service import MetricService
from common.models import SpotifyMetricIn, SpotifyMetricOut
from common.security import AuthenticatedUser, get_current_user
from services.spotify_service.api.dependencies import get_metric_service

router = APIRouter()


@router.post("/metrics", response_model=SpotifyMetricOut, status_code=status.HTTP_201_CREATED)
async def create_metric(
    metric: SpotifyMetricIn,
    current_user: AuthenticatedUser = Depends(get_current_user),
    metric_service: MetricService = Depends(get_metric_service),
):
    return await metric_service.ingest(current_user.id, metric)


@router.get("/campaigns/{campaign_id}/metrics", response_model=list[SpotifyMetricOut])
async def list_campaign_metrics(
    campaign_id: str,
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    metric_service: MetricService = Depends(get_metric_service),
):
    return await metric_service.list_for_campaign(
        current_user.id, campaign_id, start_date, end_date
    )
