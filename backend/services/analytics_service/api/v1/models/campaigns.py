"""
Request and response models for campaign endpoints.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_serializer, model_validator

from common.models import CamelModel, CampaignStatus


class CampaignCreateRequest(CamelModel):
    """New campaign. `end_date` may be left open."""

    name: str = Field(min_length=1, max_length=255)
    meta_ad_account_id: Optional[str] = None
    spotify_account_id: Optional[str] = None
    meta_ad_id: Optional[str] = Field(default=None, max_length=100)
    spotify_track_id: Optional[str] = Field(default=None, max_length=100)
    start_date: date
    end_date: Optional[date] = None
    budget: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)

    @model_validator(mode="after")
    def check_dates(self) -> "CampaignCreateRequest":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not precede startDate")
        return self


class CampaignStatusUpdateRequest(CamelModel):
    status: CampaignStatus


class CampaignResponse(CamelModel):
    id: str
    name: str
    meta_ad_account_id: Optional[str] = None
    spotify_account_id: Optional[str] = None
    meta_ad_id: Optional[str] = None
    spotify_track_id: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    budget: Decimal
    status: CampaignStatus
    created_at: datetime
    updated_at: datetime

    @field_serializer("budget")
    def serialize_budget(self, budget: Decimal) -> float:
        return float(budget)
