"""
User Repository for the Auth Service

Database operations on accounts, refresh tokens and linked platform accounts.
Each method opens its own session through `get_async_db_session`, so a single
repository instance can be shared across concurrent requests.

Example:
    ```python
    repo = UserRepository()
    user = await repo.get_by_email("artist@example.com")
    await repo.store_refresh_token(user.id, token, expires_at)
    ```
"""

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from common.database import get_async_db_session
from common.exceptions import APIError, handle_database_error
from common.models import MetaAdAccount, RefreshToken, SpotifyAccount, User

SERVICE_NAME = "auth-service"


class UserRepository:
    """Repository for account, refresh token and integration rows."""

    async def get_by_email(self, email: str) -> Optional[User]:
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                result = await session.execute(select(User).where(User.email == email))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise handle_database_error("fetching user by email", e) from e

    async def get_by_id(self, user_id: str) -> Optional[User]:
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                return await session.get(User, user_id)
        except SQLAlchemyError as e:
            raise handle_database_error("fetching user", e) from e

    async def create_user(self, email: str, name: str, password_hash: str) -> User:
        """
        Insert a new account.

        Raises:
            APIError: 400 if the email is already registered (lost a race with
                a concurrent registration).
        """
        user = User(email=email, name=name, password_hash=password_hash)
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                session.add(user)
                await session.flush()
                await session.refresh(user)
        except IntegrityError as e:
            raise APIError("Email already exists", status_code=400, internal_error=e) from e
        except SQLAlchemyError as e:
            raise handle_database_error("creating user", e) from e

        logger.info(f"Registered user {user.id}")
        return user

    async def store_refresh_token(
        self, user_id: str, token: str, expires_at: datetime
    ) -> None:
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                session.add(RefreshToken(user_id=user_id, token=token, expires_at=expires_at))
        except SQLAlchemyError as e:
            raise handle_database_error("storing refresh token", e) from e

    async def get_refresh_token(self, token: str, user_id: str) -> Optional[RefreshToken]:
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                result = await session.execute(
                    select(RefreshToken).where(
                        RefreshToken.token == token, RefreshToken.user_id == user_id
                    )
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise handle_database_error("fetching refresh token", e) from e

    async def delete_refresh_tokens(self, user_id: str) -> int:
        """Delete every refresh token of a user. Returns the number removed."""
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                result = await session.execute(
                    delete(RefreshToken).where(RefreshToken.user_id == user_id)
                )
                return result.rowcount or 0
        except SQLAlchemyError as e:
            raise handle_database_error("deleting refresh tokens", e) from e

    async def list_meta_accounts(self, user_id: str) -> list[MetaAdAccount]:
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                result = await session.execute(
                    select(MetaAdAccount)
                    .where(MetaAdAccount.user_id == user_id)
                    .order_by(MetaAdAccount.created_at)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise handle_database_error("listing Meta ad accounts", e) from e

    async def list_spotify_accounts(self, user_id: str) -> list[SpotifyAccount]:
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                result = await session.execute(
                    select(SpotifyAccount)
                    .where(SpotifyAccount.user_id == user_id)
                    .order_by(SpotifyAccount.created_at)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise handle_database_error("listing Spotify accounts", e) from e

    async def disconnect_meta_accounts(self, user_id: str) -> int:
        """Clear stored tokens and mark the user's Meta accounts disconnected."""
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                result = await session.execute(
                    update(MetaAdAccount)
                    .where(MetaAdAccount.user_id == user_id)
                    .values(access_token=None, connected=False)
                )
                return result.rowcount or 0
        except SQLAlchemyError as e:
            raise handle_database_error("disconnecting Meta ad accounts", e) from e

    async def disconnect_spotify_accounts(self, user_id: str) -> int:
        """Clear stored tokens and mark the user's Spotify accounts disconnected."""
        try:
            async with get_async_db_session(SERVICE_NAME) as session:
                result = await session.execute(
                    update(SpotifyAccount)
                    .where(SpotifyAccount.user_id == user_id)
                    .values(access_token=None, refresh_token=None, connected=False)
                )
                return result.rowcount or 0
        except SQLAlchemyError as e:
            raise handle_database_error("disconnecting Spotify accounts", e) from e
