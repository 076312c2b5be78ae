"""
Campaign lifecycle service.

Campaigns move between `active` and `paused` freely and may be completed from
either state. `completed` is terminal: any later transition is a conflict.

    active  <-->  paused
       \\          /
        completed
"""

from typing import Optional

from loguru import logger

from common.database.campaign_repository import CampaignRepository
from common.exceptions import APIError
from common.models import Campaign, CampaignStatus, MetaAdAccount, SpotifyAccount
from services.analytics_service.api.v1.models import CampaignCreateRequest


class CampaignService:
    """Campaign creation, lookup and status transitions for one owner at a time."""

    def __init__(self, campaigns: CampaignRepository) -> None:
        self.campaigns = campaigns

    async def create_campaign(self, user_id: str, request: CampaignCreateRequest) -> Campaign:
        """
        Create a campaign in the `active` state.

        Raises:
            APIError: 400 if a linked account id does not belong to the caller.
        """
        linked = (
            (MetaAdAccount, request.meta_ad_account_id, "Meta ad account"),
            (SpotifyAccount, request.spotify_account_id, "Spotify account"),
        )
        for model, account_id, label in linked:
            if account_id and not await self.campaigns.owns_account(model, account_id, user_id):
                raise APIError(f"{label} not found", status_code=400)

        return await self.campaigns.create(
            user_id,
            status=CampaignStatus.ACTIVE.value,
            **request.model_dump(exclude_none=True),
        )

    async def list_campaigns(
        self, user_id: str, status: Optional[CampaignStatus] = None
    ) -> list[Campaign]:
        return await self.campaigns.list_for_user(user_id, status)

    async def get_campaign(self, campaign_id: str, user_id: str) -> Campaign:
        campaign = await self.campaigns.get_for_user(campaign_id, user_id)
        if campaign is None:
            raise APIError("Campaign not found", status_code=404)
        return campaign

    async def update_status(
        self, campaign_id: str, user_id: str, status: CampaignStatus
    ) -> Campaign:
        """
        Move a campaign to a new status.

        Raises:
            APIError: 404 if the campaign is missing, 409 if it is completed.
        """
        campaign = await self.get_campaign(campaign_id, user_id)
        if campaign.status == CampaignStatus.COMPLETED.value:
            raise APIError("Completed campaigns cannot change status", status_code=409)

        updated = await self.campaigns.update_status(campaign_id, user_id, status)
        if updated is None:
            # Completed by a concurrent request after the read above
            logger.warning(f"Campaign {campaign_id} completed during status update")
            raise APIError("Completed campaigns cannot change status", status_code=409)
        return updated
