"""
Meta ad metric endpoints.

Endpoints:
    POST /metrics
        Store one daily snapshot of a Meta ad (201). `spend` is required; a
        snapshot without it is rejected with 422.

    GET /campaigns/{campaign_id}/metrics
        The campaign's snapshots ordered by date descending, optionally
        limited to an inclusive `start_date` / `end_date` range.

Every endpoint requires a bearer token and counts against the caller's
hourly subscription quota.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from common.metric_service import MetricService
from common.models import MetaAdMetricIn, MetaAdMetricOut
from common.security import AuthenticatedUser, get_current_user
from services.meta_service.api.dependencies import get_metric_service

router = APIRouter()


@router.post("/metrics", response_model=MetaAdMetricOut, status_code=status.HTTP_201_CREATED)
async def create_metric(
    metric: MetaAdMetricIn,
    current_user: AuthenticatedUser = Depends(get_current_user),
    metric_service: MetricService = Depends(get_metric_service),
):
    return await metric_service.ingest(current_user.id, metric)


@router.get("/campaigns/{campaign_id}/metrics", response_model=list[MetaAdMetricOut])
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
