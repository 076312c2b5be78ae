"""
Tests for token issuing, verification and password hashing.
"""

from datetime import timedelta

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
import pytest

from common.config import BaseServiceSettings
from common.security import (
    AuthenticatedUser,
    TokenError,
    TokenExpiredError,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
    get_optional_user,
    hash_password,
    verify_password,
)
from common.security import auth as auth_module

SECRET = "unit-test-secret"


class TestTokens:
    """Tests for JWT creation and decoding."""

    def test_access_token_round_trip_claims(self):
        """Test that an access token carries subject, email, tier and type."""
        token = create_access_token("user-1", "a@example.com", SECRET, timedelta(minutes=5), tier="starter")

        claims = decode_token(token, SECRET, expected_type="access")

        assert claims["sub"] == "user-1"
        assert claims["email"] == "a@example.com"
        assert claims["tier"] == "starter"
        assert claims["type"] == "access"

    def test_expired_token_raises_expired_error(self):
        """Test that an expired token raises TokenExpiredError."""
        token = create_access_token("user-1", "a@example.com", SECRET, timedelta(seconds=-30))

        with pytest.raises(TokenExpiredError):
            decode_token(token, SECRET, expected_type="access")

    def test_wrong_secret_is_rejected(self):
        """Test that a token signed with another secret is invalid."""
        token = create_access_token("user-1", "a@example.com", "other-secret", timedelta(minutes=5))

        with pytest.raises(TokenError):
            decode_token(token, SECRET, expected_type="access")

    def test_refresh_token_cannot_be_used_as_access_token(self):
        """Test that the type claim keeps refresh and access tokens apart."""
        token = create_refresh_token("user-1", SECRET, timedelta(days=1))

        with pytest.raises(TokenError):
            decode_token(token, SECRET, expected_type="access")

    def test_refresh_tokens_are_unique(self):
        """Test that two refresh tokens issued together differ."""
        first = create_refresh_token("user-1", SECRET, timedelta(days=1))
        second = create_refresh_token("user-1", SECRET, timedelta(days=1))

        assert first != second


class TestPasswords:
    """Tests for bcrypt hashing."""

    def test_hash_verifies_only_original_password(self):
        """Test that a hash accepts the original password and nothing else."""
        password_hash = hash_password("correct-horse", rounds=4)

        assert password_hash != "correct-horse"
        assert verify_password("correct-horse", password_hash)
        assert not verify_password("wrong-horse", password_hash)


class TestAuthDependencies:
    """Tests for the FastAPI authentication dependencies."""

    @pytest.fixture
    def client(self) -> TestClient:
        app = FastAPI()

        @app.get("/me")
        async def me(user: AuthenticatedUser = Depends(get_current_user)):
            return user.model_dump()

        @app.get("/maybe")
        async def maybe(user=Depends(get_optional_user)):
            return {"user": user.id if user else None}

        return TestClient(app)

    def test_missing_token_returns_401(self, client):
        """Test that a request without a token is rejected."""
        response = client.get("/me")

        assert response.status_code == 401
        assert response.json()["detail"] == "No token provided"

    def test_expired_token_returns_401(self, client, make_token):
        """Test that an expired token is reported as expired."""
        token = make_token("user-1", expires_delta=timedelta(seconds=-5))

        response = client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Token expired"

    def test_valid_token_returns_user(self, client, make_token):
        """Test that a valid token resolves to the user it names."""
        token = make_token("user-1", tier="professional")

        response = client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {
            "id": "user-1",
            "email": "artist@example.com",
            "tier": "professional",
        }

    def test_optional_user_ignores_invalid_token(self, client):
        """Test that an invalid token makes the caller anonymous."""
        response = client.get("/maybe", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 200
        assert response.json() == {"user": None}

    def test_app_settings_are_used_without_rereading_environment(self, monkeypatch):
        """Test that tokens are verified with the serving app's settings, read once."""
        app = FastAPI()
        app.state.settings = BaseServiceSettings(JWT_SECRET=SECRET)

        @app.get("/me")
        async def me(user: AuthenticatedUser = Depends(get_current_user)):
            return user.model_dump()

        def fail_get_settings(*args, **kwargs):
            raise AssertionError("settings were rebuilt for a request")

        monkeypatch.setattr(auth_module, "get_settings", fail_get_settings)
        client = TestClient(app)
        token = create_access_token(
            user_id="user-1", email="artist@example.com", secret=SECRET,
            expires_delta=timedelta(minutes=5),
        )

        responses = [
            client.get("/me", headers={"Authorization": f"Bearer {token}"}) for _ in range(3)
        ]

        assert [response.status_code for response in responses] == [200, 200, 200]

    def test_default_settings_are_cached(self):
        """Test that apps without their own settings share one cached instance."""
        assert auth_module.default_token_settings() is auth_module.default_token_settings()
