"""
Pytest fixtures for the Meta Ads service tests.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

from bson import ObjectId
from fastapi.testclient import TestClient
import pytest

from common.metric_service import MetricService
from services.meta_service import create_meta_app
from services.meta_service.api.dependencies import (
    META_PLATFORM,
    get_metric_service,
    rate_limiter,
)

CAMPAIGN_ID = "0d8a3c0e-3f43-4a57-9b3c-6f7f2a1e9b10"


@pytest.fixture(autouse=True)
def reset_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def campaign_id() -> str:
    return CAMPAIGN_ID


@pytest.fixture
def campaign(sample_user_id):
    return SimpleNamespace(id=CAMPAIGN_ID, user_id=sample_user_id, meta_ad_id="ad-42")


@pytest.fixture
def mock_campaigns(campaign):
    """Campaign repository returning the sample campaign for its own id only."""
    campaigns = AsyncMock()

    async def get_for_user(campaign_id, user_id):
        # Postgres compares UUIDs case-insensitively
        if campaign_id.lower() == campaign.id and user_id == campaign.user_id:
            return campaign
        return None

    campaigns.get_for_user.side_effect = get_for_user
    return campaigns


@pytest.fixture
def mock_repository():
    """Metric collection double assigning an ObjectId on insert."""
    repository = AsyncMock()
    repository.insert.side_effect = lambda document: {**document, "_id": ObjectId()}
    repository.find_range.return_value = []
    return repository


@pytest.fixture
def metric_service(mock_campaigns, mock_repository) -> MetricService:
    return MetricService(META_PLATFORM, mock_campaigns, repository=mock_repository)


@pytest.fixture
def client(metric_service) -> TestClient:
    app = create_meta_app(init_store=False)
    app.dependency_overrides[get_metric_service] = lambda: metric_service
    return TestClient(app)


@pytest.fixture
def snapshot() -> dict:
    return {
        "campaignId": CAMPAIGN_ID,
        "adId": "ad-42",
        "date": "2024-06-01",
        "impressions": 12000,
        "clicks": 340,
        "spend": 85.5,
        "conversions": 12,
    }
