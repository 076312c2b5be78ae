"""
Campaign model - a music-promotion campaign linking a Meta ad to a Spotify track.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from common.database import Base
from common.models.users import new_id


class CampaignStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class Campaign(Base):
    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=new_id,
        server_default=text("gen_random_uuid()"),
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    meta_ad_account_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False), ForeignKey("meta_ad_account.id", ondelete="SET NULL")
    )
    spotify_account_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False), ForeignKey("spotify_account.id", ondelete="SET NULL")
    )
    # Platform identifiers referenced by metric documents
    meta_ad_id: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    spotify_track_id: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    budget: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    status: Mapped[str] = mapped_column(
        String(20), default=CampaignStatus.ACTIVE.value, server_default="active"
    )

    __table_args__ = (
        CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_campaign_dates"),
        CheckConstraint("status IN ('active', 'paused', 'completed')", name="ck_campaign_status"),
    )
