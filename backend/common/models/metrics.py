"""
Metric snapshot models for the metric store.

Both collections are append-only: one document per platform object per day,
referencing a campaign and the platform identifier the campaign tracks.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import Field

from common.models.camel import CamelModel


def utc_today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


def day_start(day: dt.date) -> dt.datetime:
    """Midnight UTC of a day; BSON has no date-only type."""
    return dt.datetime.combine(day, dt.time.min, tzinfo=dt.timezone.utc)


class MetricDocument(CamelModel):
    campaign_id: str = Field(min_length=1)
    date: dt.date

    def to_document(self) -> dict[str, Any]:
        """Return the BSON-ready document with camelCase keys."""
        document = self.model_dump(by_alias=True, exclude_none=True)
        document["date"] = day_start(self.date)
        return document


class MetaAdMetricIn(MetricDocument):
    """Daily Meta ad delivery counters."""

    ad_id: str = Field(min_length=1)
    impressions: int = Field(ge=0)
    clicks: int = Field(ge=0)
    spend: float = Field(ge=0)
    conversions: Optional[int] = Field(default=None, ge=0)


class SpotifyMetricIn(MetricDocument):
    """Daily Spotify for Artists counters for one track."""

    track_id: str = Field(min_length=1)
    streams: int = Field(ge=0)
    listeners: Optional[int] = Field(default=None, ge=0)
    saves: Optional[int] = Field(default=None, ge=0)


class MetaAdMetricOut(MetaAdMetricIn):
    id: str


class SpotifyMetricOut(SpotifyMetricIn):
    id: str


def from_document(model: type[MetricDocument], document: dict[str, Any]) -> Any:
    """Build a response model from a stored document."""
    data = {key: value for key, value in document.items() if key != "_id"}
    data["id"] = str(document["_id"])
    data["date"] = document["date"].date()
    return model.model_validate(data)
