"""
Pytest fixtures for the Spotify service tests.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

from bson import ObjectId
from fastapi.testclient import TestClient
import pytest

from common.metric_service import MetricService
from services.spotify_service import create_spotify_app
from services.spotify_service.api.dependencies import (
    SPOTIFY_PLATFORM,
    get_metric_service,
    rate_limiter,
)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def campaign_id() -> str:
    return "3b9f1d2c-5e6a-4b7c-8d9e-0f1a2b3c4d5e"


@pytest.fixture
def campaign(campaign_id, sample_user_id):
    return SimpleNamespace(
        id=campaign_id, user_id=sample_user_id, spotify_track_id="4uLU6hMCjMI75M1A2tKUQC"
    )


@pytest.fixture
def mock_campaigns(campaign):
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
    repository = AsyncMock()
    repository.insert.side_effect = lambda document: {**document, "_id": ObjectId()}
    repository.find_range.return_value = []
    return repository


@pytest.fixture
def client(mock_campaigns, mock_repository) -> TestClient:
    service = MetricService(SPOTIFY_PLATFORM, mock_campaigns, repository=mock_repository)
    app = create_spotify_app(init_store=False)
    app.dependency_overrides[get_metric_service] = lambda: service
    return TestClient(app)


@pytest.fixture
def snapshot(campaign_id) -> dict:
    return {
        "campaignId": campaign_id,
        "trackId": "4uLU6hMCjMI75M1A2tKUQC",
        "date": "2024-06-01",
        "streams": 5400,
        "listeners": 3100,
    }
