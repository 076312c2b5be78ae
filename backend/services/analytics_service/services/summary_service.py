"""
Campaign performance summaries.

Builds the MetricSnapshot series of a campaign from both metric collections.
Snapshots of each platform are summed per day, the two daily frames are outer
joined on date (a day with data on only one platform counts the other as
zero), and the totals over the range give the derived ratios:

    ctr                 clicks / impressions
    cpc                 spend / clicks
    cost_per_stream     spend / streams
    budget_utilization  spend / budget

A ratio whose denominator is zero is reported as null.

Example:
    ```python
    service = SummaryService(CampaignRepository("analytics-service"))
    summary = await service.build_summary(campaign_id, user.id)
    summary.totals.cost_per_stream
    ```
"""

import asyncio
from datetime import date, timedelta
from typing import Any, Optional

from loguru import logger
import pandas as pd

from common.database.campaign_repository import CampaignRepository
from common.database.metric_store import (
    META_AD_METRICS,
    SPOTIFY_METRICS,
    MetricRepository,
    get_metric_database,
)
from common.exceptions import APIError
from common.models.campaigns import Campaign
from common.models.metrics import utc_today
from services.analytics_service.api.v1.models import (
    CampaignSummaryResponse,
    MetricSnapshot,
    SummaryTotals,
)

META_COLUMNS = ["impressions", "clicks", "spend", "conversions"]
SPOTIFY_COLUMNS = ["streams", "listeners", "saves"]
COUNTER_COLUMNS = ["impressions", "clicks", "conversions", "streams", "listeners", "saves"]

RATIO_PRECISION = 4


def daily_frame(documents: list[dict[str, Any]], columns: list[str]) -> pd.DataFrame:
    """Sum one platform's snapshots per day; absent optional counters count 0."""
    frame = pd.DataFrame(documents, columns=["date", *columns])
    frame["date"] = pd.to_datetime(frame["date"]).dt.date
    frame[columns] = frame[columns].astype(float).fillna(0.0)
    return frame.groupby("date")[columns].sum()


def combine_daily(meta: pd.DataFrame, spotify: pd.DataFrame) -> pd.DataFrame:
    """Outer join both platforms on date, oldest day first."""
    combined = meta.join(spotify, how="outer")
    return combined.astype(float).fillna(0.0).sort_index()


def ratio(numerator: float, denominator: float) -> Optional[float]:
    if not denominator:
        return None
    return round(numerator / denominator, RATIO_PRECISION)


def summarize_totals(combined: pd.DataFrame, budget: float) -> SummaryTotals:
    sums = combined.sum()
    counters = {column: int(sums.get(column, 0)) for column in COUNTER_COLUMNS}
    spend = round(float(sums.get("spend", 0.0)), 2)
    return SummaryTotals(
        **counters,
        spend=spend,
        ctr=ratio(counters["clicks"], counters["impressions"]),
        cpc=ratio(spend, counters["clicks"]),
        cost_per_stream=ratio(spend, counters["streams"]),
        budget_utilization=ratio(spend, budget),
    )


def snapshots(combined: pd.DataFrame) -> list[MetricSnapshot]:
    days = []
    for day, row in combined.iterrows():
        counters = {column: int(row[column]) for column in COUNTER_COLUMNS}
        days.append(MetricSnapshot(date=day, spend=round(float(row["spend"]), 2), **counters))
    return days


class SummaryService:
    """
    Per-day performance summaries for a user's campaigns.

    Args:
        campaigns: Campaign lookups scoped by owner.
        meta_metrics / spotify_metrics: Collection access; built from the
            service's metric database when omitted.
        service_name: Service whose settings select the metric database.
        max_days: Longest range a single summary may span.
    """

    def __init__(
        self,
        campaigns: CampaignRepository,
        meta_metrics: Optional[MetricRepository] = None,
        spotify_metrics: Optional[MetricRepository] = None,
        service_name: Optional[str] = None,
        max_days: int = 366,
    ) -> None:
        self.campaigns = campaigns
        self._meta_metrics = meta_metrics
        self._spotify_metrics = spotify_metrics
        self.service_name = service_name
        self.max_days = max_days

    def _repositories(self) -> tuple[MetricRepository, MetricRepository]:
        if self._meta_metrics is None or self._spotify_metrics is None:
            database = get_metric_database(self.service_name)
            self._meta_metrics = self._meta_metrics or MetricRepository(database[META_AD_METRICS])
            self._spotify_metrics = self._spotify_metrics or MetricRepository(
                database[SPOTIFY_METRICS]
            )
        return self._meta_metrics, self._spotify_metrics

    def resolve_range(
        self,
        campaign: Campaign,
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> tuple[date, date]:
        """
        Default the range to the campaign's own dates.

        An open-ended campaign runs until today (UTC).

        Raises:
            APIError: 400 for an inverted range or one longer than `max_days`.
        """
        start = start_date or campaign.start_date
        end = end_date or campaign.end_date or max(utc_today(), start)
        if end < start:
            raise APIError("end_date must not precede start_date", status_code=400)
        if end - start >= timedelta(days=self.max_days):
            raise APIError(
                f"Summary range cannot exceed {self.max_days} days", status_code=400
            )
        return start, end

    async def build_summary(
        self,
        campaign_id: str,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> CampaignSummaryResponse:
        """
        Build the summary of one campaign.

        Raises:
            APIError: 404 if the campaign is missing or not the caller's, 400
                for an invalid range.
        """
        campaign = await self.campaigns.get_for_user(campaign_id, user_id)
        if campaign is None:
            raise APIError("Campaign not found", status_code=404)

        start, end = self.resolve_range(campaign, start_date, end_date)
        meta_metrics, spotify_metrics = self._repositories()
        meta_documents, spotify_documents = await asyncio.gather(
            meta_metrics.find_range(campaign.id, start, end),
            spotify_metrics.find_range(campaign.id, start, end),
        )

        combined = combine_daily(
            daily_frame(meta_documents, META_COLUMNS),
            daily_frame(spotify_documents, SPOTIFY_COLUMNS),
        )
        logger.debug(
            f"Summary for campaign {campaign.id}: {len(meta_documents)} Meta and "
            f"{len(spotify_documents)} Spotify snapshots over {len(combined)} days"
        )

        return CampaignSummaryResponse(
            campaign_id=campaign.id,
            start_date=start,
            end_date=end,
            days=snapshots(combined),
            totals=summarize_totals(combined, float(campaign.budget or 0)),
        )
