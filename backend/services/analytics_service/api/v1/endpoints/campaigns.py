"""
Campaign API Endpoints

Endpoints:
    POST /campaigns
        Create a campaign (201). It starts `active`.

    GET /campaigns?status=
        The caller's campaigns, newest first, optionally filtered by status.

    GET /campaigns/{campaign_id}
        One campaign.

    PATCH /campaigns/{campaign_id}/status
        Change the status. `completed` is terminal.

Error Handling:
    - 400 Bad Request: Linked account not owned by the caller
    - 404 Not Found: Campaign missing or owned by another user
    - 409 Conflict: Campaign already completed
    - 422 Unprocessable Entity: Invalid body, endDate before startDate
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from common.models import CampaignStatus
from common.security import AuthenticatedUser, get_current_user
from services.analytics_service.api.dependencies import get_campaign_service
from services.analytics_service.api.v1.models import (
    CampaignCreateRequest,
    CampaignResponse,
    CampaignStatusUpdateRequest,
)
from services.analytics_service.services import CampaignService

router = APIRouter(prefix="/campaigns")


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    request: CampaignCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    return await campaign_service.create_campaign(current_user.id, request)


@router.get("", response_model=list[CampaignResponse])
async def list_campaigns(
    status_filter: Optional[CampaignStatus] = Query(default=None, alias="status"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    return await campaign_service.list_campaigns(current_user.id, status_filter)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    return await campaign_service.get_campaign(campaign_id, current_user.id)


@router.patch("/{campaign_id}/status", response_model=CampaignResponse)
async def update_campaign_status(
    campaign_id: str,
    request: CampaignStatusUpdateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    return await campaign_service.update_status(campaign_id, current_user.id, request.status)
