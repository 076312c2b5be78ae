"""
Common models for all backend services.

1. Relational models (SQLAlchemy ORM, PostgreSQL)
   - User: Registered account with its subscription tier
   - RefreshToken: Issued refresh tokens, deleted at logout
   - MetaAdAccount / SpotifyAccount: Linked platform accounts
   - Campaign: Promotion campaign with its lifecycle status

2. Metric documents (pydantic, MongoDB)
   - MetaAdMetricIn / MetaAdMetricOut: metaAdMetrics snapshots
   - SpotifyMetricIn / SpotifyMetricOut: spotifyMetrics snapshots

All ORM models inherit from common.database.Base, which provides:
- Automatic created_at and updated_at timestamps
- Automatic snake_case table name generation

Usage:
    ```python
    from common.models import Campaign, CampaignStatus

    campaign = Campaign(
        user_id=user.id,
        name="Summer single",
        spotify_track_id="4uLU6hMCjMI75M1A2tKUQC",
        start_date=date(2024, 6, 1),
    )
    session.add(campaign)
    ```
"""

from .accounts import MetaAdAccount, SpotifyAccount
from .camel import CamelModel
from .campaigns import Campaign, CampaignStatus
from .metrics import (
    MetaAdMetricIn,
    MetaAdMetricOut,
    SpotifyMetricIn,
    SpotifyMetricOut,
    day_start,
    from_document,
    utc_today,
)
from .users import RefreshToken, User

__all__ = [
    "CamelModel",
    "Campaign",
    "CampaignStatus",
    "MetaAdAccount",
    "MetaAdMetricIn",
    "MetaAdMetricOut",
    "RefreshToken",
    "SpotifyAccount",
    "SpotifyMetricIn",
    "SpotifyMetricOut",
    "User",
    "day_start",
    "from_document",
    "utc_today",
]
