"""
Metric ingestion and retrieval shared by the Meta and Spotify services.

Both services store daily snapshots the same way and differ only in the
collection they write and the platform identifier a snapshot carries:

    ==============  ================  ==========  ==================
    Service         Collection        Field       Campaign column
    ==============  ================  ==========  ==================
    meta-service    metaAdMetrics     adId        meta_ad_id
    spotify-service spotifyMetrics    trackId     spotify_track_id
    ==============  ================  ==========  ==================

Before a snapshot is stored the service checks that its campaign exists, that
it belongs to the caller, and that the campaign tracks the same platform
identifier. A campaign that has no identifier configured yet accepts any.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from loguru import logger

from common.database.campaign_repository import CampaignRepository
from common.database.metric_store import MetricRepository, get_metric_database
from common.exceptions import APIError
from common.models.metrics import MetricDocument, from_document


@dataclass(frozen=True)
class MetricPlatform:
    """How one platform's snapshots map onto campaigns."""

    collection: str
    id_field: str
    campaign_column: str
    input_model: type[MetricDocument]
    output_model: type[MetricDocument]

    @property
    def id_alias(self) -> str:
        return self.input_model.model_fields[self.id_field].alias or self.id_field


class MetricService:
    """
    Business logic for one metric collection.

    Args:
        platform: Collection and identifier mapping.
        campaigns: Campaign lookups scoped by owner.
        repository: Collection access; built from the service's metric
            database when omitted.
        service_name: Service whose settings select the metric database.
    """

    def __init__(
        self,
        platform: MetricPlatform,
        campaigns: CampaignRepository,
        repository: Optional[MetricRepository] = None,
        service_name: Optional[str] = None,
    ) -> None:
        self.platform = platform
        self.campaigns = campaigns
        self._repository = repository
        self.service_name = service_name

    @property
    def repository(self) -> MetricRepository:
        # The client is created on first use, inside the running event loop
        if self._repository is None:
            database = get_metric_database(self.service_name)
            self._repository = MetricRepository(database[self.platform.collection])
        return self._repository

    async def _owned_campaign(self, campaign_id: str, user_id: str) -> Any:
        campaign = await self.campaigns.get_for_user(campaign_id, user_id)
        if campaign is None:
            raise APIError("Campaign not found", status_code=404)
        return campaign

    async def ingest(self, user_id: str, metric: MetricDocument) -> MetricDocument:
        """
        Store one daily snapshot.

        Raises:
            APIError: 404 if the campaign is missing or not the caller's, 422 if
                the snapshot's platform identifier differs from the campaign's.
            HTTPException: 422 if the collection validator rejects the document.
        """
        campaign = await self._owned_campaign(metric.campaign_id, user_id)

        expected = getattr(campaign, self.platform.campaign_column)
        actual = getattr(metric, self.platform.id_field)
        if expected and expected != actual:
            raise APIError(
                f"{self.platform.id_alias} does not match the campaign",
                status_code=422,
            )

        # Store the canonical id so range queries match however the caller spelled it
        document = metric.to_document()
        document["campaignId"] = str(campaign.id)
        stored = await self.repository.insert(document)
        logger.info(
            f"Stored {self.platform.collection} snapshot for campaign "
            f"{campaign.id} on {metric.date.isoformat()}"
        )
        return from_document(self.platform.output_model, stored)

    async def list_for_campaign(
        self,
        user_id: str,
        campaign_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[MetricDocument]:
        """Return the campaign's snapshots, newest first."""
        if start_date and end_date and end_date < start_date:
            raise APIError("end_date must not precede start_date", status_code=400)

        campaign = await self._owned_campaign(campaign_id, user_id)
        documents = await self.repository.find_range(str(campaign.id), start_date, end_date)
        return [from_document(self.platform.output_model, doc) for doc in documents]
