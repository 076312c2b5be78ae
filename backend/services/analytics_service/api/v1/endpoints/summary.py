"""
Campaign summary endpoint.

    GET /campaigns/{campaign_id}/summary?start_date&end_date

Returns the per-day MetricSnapshot series of both platforms plus totals, CTR,
CPC, cost per stream and budget utilisation. The range defaults to the
campaign's own start and end dates (today for an open-ended campaign).
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from common.security import AuthenticatedUser, get_current_user
from services.analytics_service.api.dependencies import get_summary_service
from services.analytics_service.api.v1.models import CampaignSummaryResponse
from services.analytics_service.services import SummaryService

router = APIRouter()


@router.get("/campaigns/{campaign_id}/summary", response_model=CampaignSummaryResponse)
async def get_campaign_summary(
    campaign_id: str,
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    summary_service: SummaryService = Depends(get_summary_service),
):
    return await summary_service.build_summary(
        campaign_id, current_user.id, start_date, end_date
    )
