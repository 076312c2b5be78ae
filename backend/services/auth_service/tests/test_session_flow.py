"""
End-to-end session tests: GatewayClient -> gateway -> auth service.
"""

from datetime import timedelta

import httpx
import pytest

from common.client import GatewayClient, SessionExpiredError
from common.config import GatewaySettings
from services.gateway import create_gateway_app


@pytest.fixture
def gateway_client(auth_app) -> GatewayClient:
    settings = GatewaySettings(AUTH_SERVICE_URL="http://localhost:3001")
    gateway = create_gateway_app(settings, transport=httpx.ASGITransport(app=auth_app))
    return GatewayClient("http://gateway", transport=httpx.ASGITransport(app=gateway))


class TestSessionThroughGateway:
    """Tests for login and token refresh through the gateway."""

    @pytest.mark.asyncio
    async def test_register_then_login(self, gateway_client):
        """Test that login through the gateway returns `{user, tokens}` and stores them."""
        async with gateway_client as client:
            await client.register("artist@example.com", "correct-horse", "Nova")
            body = await client.login("artist@example.com", "correct-horse")

            assert body["user"]["email"] == "artist@example.com"
            assert client.tokens.access_token == body["tokens"]["accessToken"]
            assert client.tokens.refresh_token == body["tokens"]["refreshToken"]

    @pytest.mark.asyncio
    async def test_expired_access_token_is_refreshed(self, gateway_client, make_token):
        """Test that an expired access token is refreshed once and the request retried."""
        async with gateway_client as client:
            body = await client.register("artist@example.com", "correct-horse", "Nova")
            user_id = body["user"]["id"]
            expired = make_token(user_id, expires_delta=timedelta(minutes=-1))
            client.set_tokens(expired, body["tokens"]["refreshToken"])

            profile = await client.profile()

            assert profile["id"] == user_id
            assert client.tokens.access_token != expired
            assert client.tokens.refresh_token == body["tokens"]["refreshToken"]

    @pytest.mark.asyncio
    async def test_revoked_session_raises(self, gateway_client, make_token, user_repository):
        """Test that a failed refresh clears the tokens and raises SessionExpiredError."""
        async with gateway_client as client:
            body = await client.register("artist@example.com", "correct-horse", "Nova")
            user_repository.refresh_tokens.clear()
            expired = make_token(body["user"]["id"], expires_delta=timedelta(minutes=-1))
            client.set_tokens(expired, body["tokens"]["refreshToken"])

            with pytest.raises(SessionExpiredError):
                await client.profile()
            assert client.tokens is None
