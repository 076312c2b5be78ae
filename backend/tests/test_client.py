"""
Tests for the gateway client and its one-shot token refresh.
"""

import json

import httpx
import pytest

from common.client import GatewayClient, SessionExpiredError

AUTH = "/auth/api/v1"


class FakeGateway:
    """httpx handler standing in for the gateway."""

    def __init__(self, refresh_status: int = 200, protected_status_after_refresh: int = 200):
        self.refresh_status = refresh_status
        self.protected_status_after_refresh = protected_status_after_refresh
        self.valid_access_token = "access-1"
        self.calls: list[tuple[str, str, str | None]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        authorization = request.headers.get("Authorization")
        self.calls.append((request.method, request.url.path, authorization))

        if request.url.path == f"{AUTH}/login":
            return httpx.Response(
                200,
                json={
                    "user": {"id": "user-1", "email": "artist@example.com"},
                    "tokens": {"accessToken": "access-1", "refreshToken": "refresh-1"},
                },
            )
        if request.url.path == f"{AUTH}/refresh":
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"detail": "Invalid or expired refresh token"})
            assert json.loads(request.content) == {"refreshToken": "refresh-1"}
            self.valid_access_token = "access-2"
            return httpx.Response(200, json={"accessToken": "access-2", "refreshToken": "refresh-1"})

        if authorization != f"Bearer {self.valid_access_token}":
            return httpx.Response(401, json={"detail": "Token expired"})
        if self.valid_access_token == "access-2":
            return httpx.Response(self.protected_status_after_refresh, json={"ok": True})
        return httpx.Response(200, json={"ok": True})

    def paths(self) -> list[str]:
        return [path for _, path, _ in self.calls]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


def make_client(gateway: FakeGateway) -> GatewayClient:
    return GatewayClient("http://gateway.test", transport=httpx.MockTransport(gateway))


class TestGatewayClient:
    """Tests for GatewayClient."""

    @pytest.mark.asyncio
    async def test_login_stores_tokens_and_sends_bearer(self, gateway):
        """Test that a login starts a session used by later requests."""
        async with make_client(gateway) as client:
            body = await client.login("artist@example.com", "correct-horse")
            response = await client.get("/analytics/api/v1/campaigns")

        assert body["user"]["id"] == "user-1"
        assert client.tokens.access_token == "access-1"
        assert response.status_code == 200
        assert gateway.calls[-1][2] == "Bearer access-1"

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed_and_request_retried_once(self, gateway):
        """Test that a 401 triggers exactly one refresh and one retry."""
        async with make_client(gateway) as client:
            client.set_tokens("expired-access", "refresh-1")

            response = await client.get("/analytics/api/v1/campaigns")

        assert response.status_code == 200
        assert client.tokens.access_token == "access-2"
        assert gateway.paths() == [
            "/analytics/api/v1/campaigns",
            f"{AUTH}/refresh",
            "/analytics/api/v1/campaigns",
        ]
        assert gateway.calls[-1][2] == "Bearer access-2"

    @pytest.mark.asyncio
    async def test_second_401_is_returned_without_another_refresh(self):
        """Test that the retried request is not refreshed a second time."""
        gateway = FakeGateway(protected_status_after_refresh=401)
        async with make_client(gateway) as client:
            client.set_tokens("expired-access", "refresh-1")

            response = await client.get("/analytics/api/v1/campaigns")

        assert response.status_code == 401
        assert gateway.paths().count(f"{AUTH}/refresh") == 1

    @pytest.mark.asyncio
    async def test_failed_refresh_clears_session(self):
        """Test that a rejected refresh ends the session."""
        gateway = FakeGateway(refresh_status=401)
        async with make_client(gateway) as client:
            client.set_tokens("expired-access", "refresh-1")

            with pytest.raises(SessionExpiredError):
                await client.get("/analytics/api/v1/campaigns")

        assert client.tokens is None

    @pytest.mark.asyncio
    async def test_anonymous_401_is_not_refreshed(self, gateway):
        """Test that a request sent without a token is never refreshed."""
        async with make_client(gateway) as client:
            response = await client.get("/analytics/api/v1/campaigns")

        assert response.status_code == 401
        assert gateway.paths() == ["/analytics/api/v1/campaigns"]
        assert gateway.calls[0][2] is None
