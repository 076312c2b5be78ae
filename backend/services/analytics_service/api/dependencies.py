"""
Shared API Dependencies for Analytics Service

Dependencies:
    - get_campaign_service: Cached campaign lifecycle service
    - get_summary_service: Cached summary service reading both metric collections
    - rate_limiter: Hourly quota of the caller's subscription tier

Example:
    ```python
    @router.get("/campaigns")
    async def list_campaigns(
        current_user: AuthenticatedUser = Depends(get_current_user),
        campaign_service: CampaignService = Depends(get_campaign_service),
    ):
        return await campaign_service.list_campaigns(current_user.id)
    ```
"""

from functools import lru_cache

from common.config import AnalyticsServiceSettings
from common.database.campaign_repository import CampaignRepository
from common.rate_limit import SubscriptionRateLimiter
from services.analytics_service.services import CampaignService, SummaryService

SERVICE_NAME = "analytics-service"

rate_limiter = SubscriptionRateLimiter()


@lru_cache(maxsize=1)
def get_campaign_repository() -> CampaignRepository:
    return CampaignRepository(SERVICE_NAME)


@lru_cache(maxsize=1)
def get_campaign_service() -> CampaignService:
    return CampaignService(get_campaign_repository())


@lru_cache(maxsize=1)
def get_summary_service() -> SummaryService:
    settings = AnalyticsServiceSettings()
    return SummaryService(
        get_campaign_repository(),
        service_name=SERVICE_NAME,
        max_days=settings.MAX_SUMMARY_DAYS,
    )
