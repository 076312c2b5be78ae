"""
Shared API dependencies for the Spotify metrics service.

Dependencies:
    - get_metric_service: Cached MetricService bound to spotifyMetrics
    - rate_limiter: Hourly quota of the caller's subscription tier
"""

from functools import lru_cache

from common.database.campaign_repository import CampaignRepository
from common.database.metric_store import SPOTIFY_METRICS
from common.metric_service import MetricPlatform, MetricService
from common.models import SpotifyMetricIn, SpotifyMetricOut
from common.rate_limit import SubscriptionRateLimiter

SERVICE_NAME = "spotify-service"

SPOTIFY_PLATFORM = MetricPlatform(
    collection=SPOTIFY_METRICS,
    id_field="track_id",
    campaign_column="spotify_track_id",
    input_model=SpotifyMetricIn,
    output_model=SpotifyMetricOut,
)

rate_limiter = SubscriptionRateLimiter()


@lru_cache(maxsize=1)
def get_metric_service() -> MetricService:
    return MetricService(
        SPOTIFY_PLATFORM, CampaignRepository(SERVICE_NAME), service_name=SERVICE_NAME
    )
