"""
Shared API dependencies for the Meta Ads metrics service.

Dependencies:
    - get_metric_service: Cached MetricService bound to metaAdMetrics
    - rate_limiter: Hourly quota of the caller's subscription tier
"""

from functools import lru_cache

from common.database.campaign_repository import CampaignRepository
from common.database.metric_store import META_AD_METRICS
from common.metric_service import MetricPlatform, MetricService
from common.models import MetaAdMetricIn, MetaAdMetricOut
from common.rate_limit import SubscriptionRateLimiter

SERVICE_NAME = "meta-service"

META_PLATFORM = MetricPlatform(
    collection=META_AD_METRICS,
    id_field="ad_id",
    campaign_column="meta_ad_id",
    input_model=MetaAdMetricIn,
    output_model=MetaAdMetricOut,
)

rate_limiter = SubscriptionRateLimiter()


@lru_cache(maxsize=1)
def get_metric_service() -> MetricService:
    return MetricService(
        META_PLATFORM, CampaignRepository(SERVICE_NAME), service_name=SERVICE_NAME
    )
