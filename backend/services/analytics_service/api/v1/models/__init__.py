"""
Request and response models for analytics service API endpoints.
"""

from .campaigns import (
    CampaignCreateRequest,
    CampaignResponse,
    CampaignStatusUpdateRequest,
)
from .summary import CampaignSummaryResponse, MetricSnapshot, SummaryTotals

__all__ = [
    "CampaignCreateRequest",
    "CampaignResponse",
    "CampaignStatusUpdateRequest",
    "CampaignSummaryResponse",
    "MetricSnapshot",
    "SummaryTotals",
]
