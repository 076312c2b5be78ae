"""
Pytest fixtures for the auth service tests.
"""

from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from common.config import AuthServiceSettings
from common.models import MetaAdAccount, RefreshToken, SpotifyAccount, User
from common.models.users import new_id
from common.security.tokens import utc_now
from services.auth_service import create_auth_app
from services.auth_service.api.dependencies import get_auth_service
from services.auth_service.services.auth_service import AuthenticationService


class InMemoryUserRepository:
    """Stand-in for UserRepository keeping rows in dictionaries."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.refresh_tokens: list[RefreshToken] = []
        self.meta_accounts: list[MetaAdAccount] = []
        self.spotify_accounts: list[SpotifyAccount] = []

    async def get_by_email(self, email: str) -> Optional[User]:
        return next((user for user in self.users.values() if user.email == email), None)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def create_user(self, email: str, name: str, password_hash: str) -> User:
        now = utc_now()
        user = User(
            id=new_id(), email=email, name=name, password_hash=password_hash,
            tier="free", created_at=now, updated_at=now,
        )
        self.users[user.id] = user
        return user

    async def store_refresh_token(self, user_id: str, token: str, expires_at: datetime) -> None:
        self.refresh_tokens.append(RefreshToken(user_id=user_id, token=token, expires_at=expires_at))

    async def get_refresh_token(self, token: str, user_id: str) -> Optional[RefreshToken]:
        return next(
            (row for row in self.refresh_tokens if row.token == token and row.user_id == user_id),
            None,
        )

    async def delete_refresh_tokens(self, user_id: str) -> int:
        before = len(self.refresh_tokens)
        self.refresh_tokens = [row for row in self.refresh_tokens if row.user_id != user_id]
        return before - len(self.refresh_tokens)

    async def list_meta_accounts(self, user_id: str) -> list[MetaAdAccount]:
        return [account for account in self.meta_accounts if account.user_id == user_id]

    async def list_spotify_accounts(self, user_id: str) -> list[SpotifyAccount]:
        return [account for account in self.spotify_accounts if account.user_id == user_id]

    async def disconnect_meta_accounts(self, user_id: str) -> int:
        return self._disconnect(self.meta_accounts, user_id)

    async def disconnect_spotify_accounts(self, user_id: str) -> int:
        return self._disconnect(self.spotify_accounts, user_id)

    @staticmethod
    def _disconnect(accounts: list, user_id: str) -> int:
        updated = 0
        for account in accounts:
            if account.user_id == user_id and account.connected:
                account.connected = False
                account.access_token = None
                if hasattr(account, "refresh_token"):
                    account.refresh_token = None
                updated += 1
        return updated


@pytest.fixture
def auth_settings() -> AuthServiceSettings:
    return AuthServiceSettings(AUTH_RATE_LIMIT="5/15 minutes", BCRYPT_ROUNDS=4)


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def auth_service(user_repository, auth_settings) -> AuthenticationService:
    return AuthenticationService(user_repository, auth_settings)


@pytest.fixture
def auth_app(auth_settings, auth_service) -> FastAPI:
    app = create_auth_app(auth_settings)
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    return app


@pytest.fixture
def client(auth_app) -> TestClient:
    return TestClient(auth_app)


@pytest.fixture
def registered_user(client) -> dict:
    """Register an account and return the `{user, tokens}` body."""
    response = client.post(
        "/api/v1/register",
        json={"email": "artist@example.com", "password": "correct-horse", "name": "Nova"},
    )
    assert response.status_code == 201
    return response.json()
