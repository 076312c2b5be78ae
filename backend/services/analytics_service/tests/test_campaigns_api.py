"""
Tests for the campaign endpoints and lifecycle rules.
"""

import pytest

from common.exceptions import APIError
from common.models import CampaignStatus, MetaAdAccount, SpotifyAccount
from services.analytics_service.api.v1.models import CampaignCreateRequest
from services.analytics_service.services import CampaignService


class TestCreateCampaign:
    """Tests for POST /campaigns."""

    def test_create_campaign(self, client, auth_headers, campaign_payload, sample_user_id,
                             campaign_repository):
        """Test that a new campaign is stored as active for the caller."""
        response = client.post("/api/v1/campaigns", json=campaign_payload, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "active"
        assert body["budget"] == 200.0
        assert body["startDate"] == "2024-06-01"
        assert campaign_repository.campaigns[body["id"]].user_id == sample_user_id

    def test_end_before_start_rejected(self, client, auth_headers, campaign_payload):
        campaign_payload["endDate"] = "2024-05-01"
        response = client.post("/api/v1/campaigns", json=campaign_payload, headers=auth_headers)
        assert response.status_code == 422

    def test_open_ended_campaign(self, client, auth_headers, campaign_payload):
        del campaign_payload["endDate"]
        response = client.post("/api/v1/campaigns", json=campaign_payload, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["endDate"] is None

    def test_negative_budget_rejected(self, client, auth_headers, campaign_payload):
        campaign_payload["budget"] = -1
        response = client.post("/api/v1/campaigns", json=campaign_payload, headers=auth_headers)
        assert response.status_code == 422

    def test_requires_token(self, client, campaign_payload):
        response = client.post("/api/v1/campaigns", json=campaign_payload)
        assert response.status_code == 401


class TestLinkedAccounts:
    """Tests for linked account ownership checks."""

    @pytest.mark.asyncio
    async def test_unowned_account_rejected(self, campaign_repository, sample_user_id):
        """Test that linking another user's Meta ad account returns 400."""
        campaign_repository.link_account(MetaAdAccount, "acct-1", "someone-else")
        service = CampaignService(campaign_repository)
        request = CampaignCreateRequest(
            name="Launch", meta_ad_account_id="acct-1", start_date="2024-06-01"
        )

        with pytest.raises(APIError) as exc_info:
            await service.create_campaign(sample_user_id, request)

        assert exc_info.value.status_code == 400
        assert campaign_repository.campaigns == {}

    @pytest.mark.asyncio
    async def test_owned_accounts_accepted(self, campaign_repository, sample_user_id):
        campaign_repository.link_account(MetaAdAccount, "acct-1", sample_user_id)
        campaign_repository.link_account(SpotifyAccount, "artist-1", sample_user_id)
        service = CampaignService(campaign_repository)
        request = CampaignCreateRequest(
            name="Launch",
            meta_ad_account_id="acct-1",
            spotify_account_id="artist-1",
            start_date="2024-06-01",
        )

        campaign = await service.create_campaign(sample_user_id, request)

        assert campaign.meta_ad_account_id == "acct-1"
        assert campaign.spotify_account_id == "artist-1"


class TestReadCampaigns:
    """Tests for listing and fetching campaigns."""

    def test_list_newest_first(self, client, auth_headers, campaign_payload):
        for name in ("First", "Second"):
            client.post(
                "/api/v1/campaigns", json={**campaign_payload, "name": name}, headers=auth_headers
            )

        response = client.get("/api/v1/campaigns", headers=auth_headers)

        assert response.status_code == 200
        assert [item["name"] for item in response.json()] == ["Second", "First"]

    def test_filter_by_status(self, client, auth_headers, stored_campaign, campaign_repository,
                              sample_user_id):
        campaign_repository.add(
            sample_user_id, name="Old", start_date=stored_campaign.start_date,
            budget=0, status=CampaignStatus.COMPLETED.value,
        )

        response = client.get(
            "/api/v1/campaigns", params={"status": "completed"}, headers=auth_headers
        )

        assert [item["name"] for item in response.json()] == ["Old"]

    def test_other_users_campaign_is_not_found(self, client, make_token, stored_campaign):
        """Test that another user's campaign is reported as 404."""
        headers = {"Authorization": f"Bearer {make_token('someone-else')}"}
        response = client.get(f"/api/v1/campaigns/{stored_campaign.id}", headers=headers)
        assert response.status_code == 404

    def test_get_campaign(self, client, auth_headers, stored_campaign):
        response = client.get(f"/api/v1/campaigns/{stored_campaign.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["metaAdId"] == "ad-42"


class TestStatusTransitions:
    """Tests for PATCH /campaigns/{campaign_id}/status."""

    def test_pause_and_resume(self, client, auth_headers, stored_campaign):
        url = f"/api/v1/campaigns/{stored_campaign.id}/status"
        assert client.patch(url, json={"status": "paused"}, headers=auth_headers).json()[
            "status"
        ] == "paused"
        assert client.patch(url, json={"status": "active"}, headers=auth_headers).json()[
            "status"
        ] == "active"

    def test_completed_is_terminal(self, client, auth_headers, stored_campaign):
        """Test that a completed campaign cannot change status (409)."""
        url = f"/api/v1/campaigns/{stored_campaign.id}/status"
        response = client.patch(url, json={"status": "completed"}, headers=auth_headers)
        assert response.status_code == 200

        response = client.patch(url, json={"status": "active"}, headers=auth_headers)
        assert response.status_code == 409
        assert stored_campaign.status == "completed"

    def test_unknown_status_rejected(self, client, auth_headers, stored_campaign):
        url = f"/api/v1/campaigns/{stored_campaign.id}/status"
        response = client.patch(url, json={"status": "archived"}, headers=auth_headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_concurrent_completion_is_conflict(self, campaign_repository, stored_campaign,
                                                     sample_user_id):
        """Test that an update losing the race against completion returns 409."""
        service = CampaignService(campaign_repository)
        original_update = campaign_repository.update_status

        async def complete_first(campaign_id, user_id, status):
            stored_campaign.status = CampaignStatus.COMPLETED.value
            return await original_update(campaign_id, user_id, status)

        campaign_repository.update_status = complete_first

        with pytest.raises(APIError) as exc_info:
            await service.update_status(stored_campaign.id, sample_user_id, CampaignStatus.PAUSED)
        assert exc_info.value.status_code == 409


class TestQuota:
    """Tests for the subscription quota on analytics endpoints."""

    def test_free_tier_101st_request_limited(self, client, auth_headers):
        for _ in range(100):
            assert client.get("/api/v1/campaigns", headers=auth_headers).status_code == 200

        response = client.get("/api/v1/campaigns", headers=auth_headers)
        assert response.status_code == 429
        assert response.json()["error"]["retryAfter"] >= 1
