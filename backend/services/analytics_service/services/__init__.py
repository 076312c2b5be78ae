"""
Business Logic Services for Analytics Service.

Provides the campaign lifecycle and the per-day performance summaries built
from both metric collections.
"""

from .campaign_service import CampaignService
from .summary_service import SummaryService

__all__ = ["CampaignService", "SummaryService"]
