"""
Authentication Service - Core Business Logic

This module implements account registration, credential checks, token issuing
and linked-account management for the auth service.

The service follows a layered architecture:
    - API Layer: FastAPI endpoints (services.auth_service.api.v1.endpoints)
    - Service Layer: This module (business logic)
    - Database Layer: UserRepository (services.auth_service.database)

Key Responsibilities:
    1. Accounts
       - Register with a unique email and a bcrypt password hash
       - Verify credentials at login without revealing which part was wrong

    2. Token Management
       - Issue short-lived access tokens (JWT_SECRET) carrying the user's tier
       - Issue long-lived refresh tokens (JWT_REFRESH_SECRET), stored server side
       - Exchange a stored, unexpired refresh token for a new access token
       - Revoke every refresh token of a user at logout

    3. Integrations
       - List the user's linked Meta ad and Spotify accounts
       - Disconnect a provider, dropping its stored platform tokens

Errors are raised as APIError with the HTTP status the endpoint should return.

Example:
    ```python
    service = AuthenticationService(UserRepository(), AuthServiceSettings())
    user, tokens = await service.login("artist@example.com", "correct-horse")
    ```
"""

from datetime import timedelta
from typing import Optional, Protocol

from loguru import logger
from starlette.concurrency import run_in_threadpool

from common.config import AuthServiceSettings
from common.exceptions import APIError
from common.models import MetaAdAccount, RefreshToken, SpotifyAccount, User
from common.security import (
    REFRESH_TOKEN_TYPE,
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from common.security.tokens import utc_now
from services.auth_service.api.v1.models import (
    IntegrationResponse,
    TokenPair,
)

PROVIDERS = ("meta", "spotify")


class UserStore(Protocol):
    async def get_by_email(self, email: str) -> Optional[User]: ...
    async def get_by_id(self, user_id: str) -> Optional[User]: ...
    async def create_user(self, email: str, name: str, password_hash: str) -> User: ...
    async def store_refresh_token(self, user_id: str, token: str, expires_at) -> None: ...
    async def get_refresh_token(self, token: str, user_id: str) -> Optional[RefreshToken]: ...
    async def delete_refresh_tokens(self, user_id: str) -> int: ...
    async def list_meta_accounts(self, user_id: str) -> list[MetaAdAccount]: ...
    async def list_spotify_accounts(self, user_id: str) -> list[SpotifyAccount]: ...
    async def disconnect_meta_accounts(self, user_id: str) -> int: ...
    async def disconnect_spotify_accounts(self, user_id: str) -> int: ...


class AuthenticationService:
    """
    Account and session operations.

    Args:
        repository: Persistence for users, refresh tokens and linked accounts.
        settings: Auth service settings (secrets, lifetimes, bcrypt cost).
    """

    def __init__(self, repository: UserStore, settings: AuthServiceSettings) -> None:
        self.repository = repository
        self.settings = settings

    def _issue_access_token(self, user: User) -> str:
        return create_access_token(
            user_id=str(user.id),
            email=user.email,
            secret=self.settings.JWT_SECRET,
            expires_delta=timedelta(minutes=self.settings.JWT_EXPIRES_MINUTES),
            tier=user.tier or "free",
            algorithm=self.settings.JWT_ALGORITHM,
        )

    async def _issue_tokens(self, user: User) -> TokenPair:
        lifetime = timedelta(days=self.settings.JWT_REFRESH_EXPIRES_DAYS)
        refresh_token = create_refresh_token(
            user_id=str(user.id),
            secret=self.settings.JWT_REFRESH_SECRET,
            expires_delta=lifetime,
            algorithm=self.settings.JWT_ALGORITHM,
        )
        await self.repository.store_refresh_token(
            str(user.id), refresh_token, utc_now() + lifetime
        )
        return TokenPair(
            access_token=self._issue_access_token(user), refresh_token=refresh_token
        )

    async def register(self, email: str, password: str, name: str) -> tuple[User, TokenPair]:
        """
        Create an account and open its first session.

        Raises:
            APIError: 400 if the email is already registered.
        """
        if await self.repository.get_by_email(email) is not None:
            raise APIError("Email already exists", status_code=400)

        # bcrypt is CPU bound; keep it off the event loop
        password_hash = await run_in_threadpool(
            hash_password, password, rounds=self.settings.BCRYPT_ROUNDS
        )
        user = await self.repository.create_user(email, name, password_hash)
        return user, await self._issue_tokens(user)

    async def login(self, email: str, password: str) -> tuple[User, TokenPair]:
        """
        Verify credentials and open a session.

        Raises:
            APIError: 401 "Invalid credentials" for an unknown email or a wrong
                password; the two cases are indistinguishable to the caller.
        """
        user = await self.repository.get_by_email(email)
        if user is None or not await run_in_threadpool(
            verify_password, password, user.password_hash
        ):
            logger.info("Rejected login attempt")
            raise APIError("Invalid credentials", status_code=401)
        return user, await self._issue_tokens(user)

    async def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        """
        Exchange a refresh token for a new access token.

        The refresh token itself is returned unchanged.

        Raises:
            APIError: 400 when no token is given, 401 when it is invalid, not
                stored or expired, 404 when its user no longer exists.
        """
        if not refresh_token:
            raise APIError("Refresh token required", status_code=400)

        try:
            claims = decode_token(
                refresh_token,
                self.settings.JWT_REFRESH_SECRET,
                expected_type=REFRESH_TOKEN_TYPE,
                algorithm=self.settings.JWT_ALGORITHM,
            )
        except TokenError as e:
            raise APIError("Invalid or expired refresh token", status_code=401) from e

        user_id = claims["sub"]
        stored = await self.repository.get_refresh_token(refresh_token, user_id)
        if stored is None or stored.expires_at <= utc_now():
            raise APIError("Invalid or expired refresh token", status_code=401)

        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise APIError("User not found", status_code=404)

        return TokenPair(
            access_token=self._issue_access_token(user), refresh_token=refresh_token
        )

    async def logout(self, user_id: str) -> None:
        removed = await self.repository.delete_refresh_tokens(user_id)
        logger.info(f"Revoked {removed} refresh token(s) for user {user_id}")

    async def get_profile(self, user_id: str) -> User:
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise APIError("User not found", status_code=404)
        return user

    async def list_integrations(self, user_id: str) -> list[IntegrationResponse]:
        meta_accounts = await self.repository.list_meta_accounts(user_id)
        spotify_accounts = await self.repository.list_spotify_accounts(user_id)

        integrations = [
            IntegrationResponse(
                id=str(account.id),
                provider="meta",
                account_id=account.account_id,
                name=account.account_name,
                connected=account.connected,
                last_sync=account.last_sync,
            )
            for account in meta_accounts
        ]
        integrations.extend(
            IntegrationResponse(
                id=str(account.id),
                provider="spotify",
                account_id=account.spotify_artist_id,
                name=account.artist_name,
                connected=account.connected,
                last_sync=account.last_sync,
            )
            for account in spotify_accounts
        )
        return integrations

    async def disconnect_integration(self, user_id: str, provider: str) -> None:
        """
        Disconnect every linked account of one provider.

        Raises:
            APIError: 400 for an unknown provider, 404 if nothing is linked.
        """
        if provider not in PROVIDERS:
            raise APIError(f"Unknown provider: {provider}", status_code=400)

        if provider == "meta":
            updated = await self.repository.disconnect_meta_accounts(user_id)
        else:
            updated = await self.repository.disconnect_spotify_accounts(user_id)

        if updated == 0:
            raise APIError(f"No {provider} account linked", status_code=404)
        logger.info(f"Disconnected {updated} {provider} account(s) for user {user_id}")
