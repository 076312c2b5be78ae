"""
Response models for campaign performance summaries.

A summary is a per-day series of MetricSnapshot rows, built from an outer join
of the Meta and Spotify snapshots on date, plus totals over the range and the
ratios derived from them. A ratio is null when its denominator is zero.
"""

import datetime as dt
from typing import Optional

from common.models import CamelModel


class MetricSnapshot(CamelModel):
    """One day of combined counters; a platform without data that day counts 0."""

    date: dt.date
    impressions: int = 0
    clicks: int = 0
    spend: float = 0.0
    conversions: int = 0
    streams: int = 0
    listeners: int = 0
    saves: int = 0


class SummaryTotals(CamelModel):
    impressions: int = 0
    clicks: int = 0
    spend: float = 0.0
    conversions: int = 0
    streams: int = 0
    listeners: int = 0
    saves: int = 0
    # clicks / impressions
    ctr: Optional[float] = None
    # spend / clicks
    cpc: Optional[float] = None
    # spend / streams
    cost_per_stream: Optional[float] = None
    # spend / budget
    budget_utilization: Optional[float] = None


class CampaignSummaryResponse(CamelModel):
    campaign_id: str
    start_date: dt.date
    end_date: dt.date
    days: list[MetricSnapshot]
    totals: SummaryTotals
