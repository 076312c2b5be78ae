"""
Campaign Repository

Campaigns are owned by the analytics service but read by the metric services,
which must check that an incoming snapshot belongs to one of the caller's
campaigns before storing it. Every query is scoped by the owning user id, so a
campaign of another user behaves exactly like a missing one.

Example:
    ```python
    repo = CampaignRepository("meta-service")
    campaign = await repo.get_for_user(campaign_id, user.id)
    if campaign is None:
        raise APIError("Campaign not found", status_code=404)
    ```
"""

from typing import Any, Optional
import uuid

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from common.database.session import get_async_db_session
from common.exceptions import handle_database_error
from common.models.accounts import MetaAdAccount, SpotifyAccount
from common.models.campaigns import Campaign, CampaignStatus


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (TypeError, ValueError):
        return False
    return True


class CampaignRepository:
    """
    Campaign rows scoped by owner.

    Args:
        service_name: Service whose engine and settings the sessions use.
    """

    def __init__(self, service_name: str) -> None:
        self.service_name = service_name

    async def get_for_user(self, campaign_id: str, user_id: str) -> Optional[Campaign]:
        """Return the campaign if it exists and belongs to `user_id`."""
        # Not a primary key the database could hold
        if not is_uuid(campaign_id):
            return None
        try:
            async with get_async_db_session(self.service_name) as session:
                result = await session.execute(
                    select(Campaign).where(
                        Campaign.id == campaign_id, Campaign.user_id == user_id
                    )
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise handle_database_error("fetching campaign", e) from e

    async def list_for_user(
        self, user_id: str, status: Optional[CampaignStatus] = None
    ) -> list[Campaign]:
        """Return the user's campaigns, newest first."""
        query = select(Campaign).where(Campaign.user_id == user_id)
        if status is not None:
            query = query.where(Campaign.status == status.value)
        query = query.order_by(Campaign.created_at.desc())
        try:
            async with get_async_db_session(self.service_name) as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise handle_database_error("listing campaigns", e) from e

    async def owns_account(
        self, model: type[MetaAdAccount] | type[SpotifyAccount], account_id: str, user_id: str
    ) -> bool:
        """Return True if the linked platform account belongs to `user_id`."""
        if not is_uuid(account_id):
            return False
        try:
            async with get_async_db_session(self.service_name) as session:
                result = await session.execute(
                    select(model.id).where(model.id == account_id, model.user_id == user_id)
                )
                return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            raise handle_database_error("fetching linked account", e) from e

    async def create(self, user_id: str, **fields: Any) -> Campaign:
        campaign = Campaign(user_id=user_id, **fields)
        try:
            async with get_async_db_session(self.service_name) as session:
                session.add(campaign)
                await session.flush()
                await session.refresh(campaign)
        except SQLAlchemyError as e:
            raise handle_database_error("creating campaign", e) from e

        logger.info(f"Created campaign {campaign.id} for user {user_id}")
        return campaign

    async def update_status(
        self, campaign_id: str, user_id: str, status: CampaignStatus
    ) -> Optional[Campaign]:
        """
        Set a campaign's status unless it has already completed.

        Returns:
            The updated campaign, or None when no row matched (missing, owned
            by someone else, or completed in the meantime).
        """
        if not is_uuid(campaign_id):
            return None
        statement = (
            update(Campaign)
            .where(
                Campaign.id == campaign_id,
                Campaign.user_id == user_id,
                Campaign.status != CampaignStatus.COMPLETED.value,
            )
            .values(status=status.value)
            .returning(Campaign)
        )
        try:
            async with get_async_db_session(self.service_name) as session:
                result = await session.execute(statement)
                campaign = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise handle_database_error("updating campaign status", e) from e

        if campaign is not None:
            logger.info(f"Campaign {campaign_id} is now {status.value}")
        return campaign
