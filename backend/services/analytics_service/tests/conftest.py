"""
Pytest fixtures for the analytics service tests.
"""

from datetime import date, timedelta
from typing import Optional
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
import pytest

from common.models import Campaign, CampaignStatus
from common.models.users import new_id
from common.security.tokens import utc_now
from services.analytics_service import create_analytics_app
from services.analytics_service.api.dependencies import (
    get_campaign_service,
    get_summary_service,
    rate_limiter,
)
from services.analytics_service.services import CampaignService, SummaryService


class InMemoryCampaignRepository:
    """Stand-in for CampaignRepository keeping campaigns in a dictionary."""

    def __init__(self) -> None:
        self.campaigns: dict[str, Campaign] = {}
        self.accounts: set[tuple[type, str, str]] = set()
        self._created = 0

    def link_account(self, model: type, account_id: str, user_id: str) -> None:
        self.accounts.add((model, account_id, user_id))

    async def get_for_user(self, campaign_id: str, user_id: str) -> Optional[Campaign]:
        campaign = self.campaigns.get(campaign_id)
        if campaign is None or campaign.user_id != user_id:
            return None
        return campaign

    async def list_for_user(
        self, user_id: str, status: Optional[CampaignStatus] = None
    ) -> list[Campaign]:
        rows = [
            campaign for campaign in self.campaigns.values()
            if campaign.user_id == user_id and (status is None or campaign.status == status.value)
        ]
        return sorted(rows, key=lambda campaign: campaign.created_at, reverse=True)

    async def owns_account(self, model: type, account_id: str, user_id: str) -> bool:
        return (model, account_id, user_id) in self.accounts

    async def create(self, user_id: str, **fields) -> Campaign:
        return self.add(user_id, **fields)

    def add(self, user_id: str, **fields) -> Campaign:
        # Distinct timestamps keep the newest-first order deterministic
        self._created += 1
        now = utc_now() + timedelta(seconds=self._created)
        campaign = Campaign(
            id=new_id(), user_id=user_id, created_at=now, updated_at=now, **fields
        )
        self.campaigns[campaign.id] = campaign
        return campaign

    async def update_status(
        self, campaign_id: str, user_id: str, status: CampaignStatus
    ) -> Optional[Campaign]:
        campaign = await self.get_for_user(campaign_id, user_id)
        if campaign is None or campaign.status == CampaignStatus.COMPLETED.value:
            return None
        campaign.status = status.value
        return campaign


@pytest.fixture(autouse=True)
def reset_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def campaign_repository() -> InMemoryCampaignRepository:
    return InMemoryCampaignRepository()


@pytest.fixture
def meta_metrics():
    repository = AsyncMock()
    repository.find_range.return_value = []
    return repository


@pytest.fixture
def spotify_metrics():
    repository = AsyncMock()
    repository.find_range.return_value = []
    return repository


@pytest.fixture
def summary_service(campaign_repository, meta_metrics, spotify_metrics) -> SummaryService:
    return SummaryService(
        campaign_repository, meta_metrics=meta_metrics, spotify_metrics=spotify_metrics
    )


@pytest.fixture
def client(campaign_repository, summary_service) -> TestClient:
    app = create_analytics_app()
    app.dependency_overrides[get_campaign_service] = lambda: CampaignService(campaign_repository)
    app.dependency_overrides[get_summary_service] = lambda: summary_service
    return TestClient(app)


@pytest.fixture
def campaign_payload() -> dict:
    return {
        "name": "Summer single",
        "metaAdId": "ad-42",
        "spotifyTrackId": "4uLU6hMCjMI75M1A2tKUQC",
        "startDate": "2024-06-01",
        "endDate": "2024-06-30",
        "budget": 200,
    }


@pytest.fixture
def stored_campaign(campaign_repository, sample_user_id) -> Campaign:
    return campaign_repository.add(
        sample_user_id,
        name="Summer single",
        meta_ad_id="ad-42",
        spotify_track_id="4uLU6hMCjMI75M1A2tKUQC",
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 30),
        budget=200,
        status=CampaignStatus.ACTIVE.value,
    )
