"""
Async client for the SongTrackPro API gateway.

Every request carries the current access token as a bearer token. When the
gateway answers 401 to a request that carried a token, the client refreshes the
session once through the auth service and replays the original request once.
If the refresh fails the stored tokens are cleared and SessionExpiredError is
raised, so the caller knows the user has to log in again.

Example:
    ```python
    async with GatewayClient("http://localhost:3000") as client:
        await client.login("artist@example.com", "correct-horse")
        response = await client.get("/analytics/api/v1/campaigns")
        campaigns = response.json()
    ```
"""

from collections.abc import Generator
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger

DEFAULT_AUTH_PATH = "/auth/api/v1"


class SessionExpiredError(Exception):
    """Raised when the session can no longer be refreshed."""


@dataclass
class SessionTokens:
    access_token: str
    refresh_token: str


class TokenRefreshAuth(httpx.Auth):
    """
    httpx auth flow adding the bearer token and refreshing it once on 401.

    Args:
        refresh_path: Gateway path of the refresh endpoint.
        tokens: Initial tokens, if a session already exists.
    """

    requires_response_body = True

    def __init__(
        self,
        refresh_path: str = f"{DEFAULT_AUTH_PATH}/refresh",
        tokens: Optional[SessionTokens] = None,
    ) -> None:
        self.refresh_path = refresh_path
        self.tokens = tokens

    def clear(self) -> None:
        self.tokens = None

    def _authorize(self, request: httpx.Request) -> bool:
        if self.tokens is None:
            request.headers.pop("Authorization", None)
            return False
        request.headers["Authorization"] = f"Bearer {self.tokens.access_token}"
        return True

    def _build_refresh_request(self, request: httpx.Request) -> httpx.Request:
        assert self.tokens is not None
        return httpx.Request(
            "POST",
            request.url.join(self.refresh_path),
            json={"refreshToken": self.tokens.refresh_token},
        )

    def _update_tokens(self, response: httpx.Response) -> None:
        if response.status_code != 200:
            logger.warning(f"Token refresh rejected with status {response.status_code}")
            self.clear()
            raise SessionExpiredError("Session expired. Please log in again.")

        body = response.json()
        self.tokens = SessionTokens(
            access_token=body["accessToken"],
            refresh_token=body.get("refreshToken") or self.tokens.refresh_token,
        )

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        sent_with_token = self._authorize(request)
        response = yield request

        if response.status_code != 401 or not sent_with_token or self.tokens is None:
            return

        logger.debug(f"Access token rejected for {request.url.path}, refreshing session")
        refresh_response = yield self._build_refresh_request(request)
        self._update_tokens(refresh_response)

        self._authorize(request)
        yield request


class GatewayClient:
    """
    Thin wrapper over httpx.AsyncClient bound to the gateway.

    Args:
        base_url: Gateway origin, e.g. "http://localhost:3000".
        transport: Optional httpx transport (tests pass an ASGITransport).
        timeout: Request timeout in seconds.
        auth_path: Gateway path prefix of the auth service API.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
        auth_path: str = DEFAULT_AUTH_PATH,
    ) -> None:
        self.auth_path = auth_path
        self.auth = TokenRefreshAuth(refresh_path=f"{auth_path}/refresh")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
            auth=self.auth,
            headers={"Content-Type": "application/json"},
        )

    @property
    def tokens(self) -> Optional[SessionTokens]:
        return self.auth.tokens

    def set_tokens(self, access_token: str, refresh_token: str) -> None:
        self.auth.tokens = SessionTokens(access_token, refresh_token)

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        return await self._client.request(method, path, **kwargs)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    async def _start_session(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self.post(f"{self.auth_path}{path}", json=payload)
        response.raise_for_status()
        body = response.json()
        tokens = body["tokens"]
        self.set_tokens(tokens["accessToken"], tokens["refreshToken"])
        return body

    async def register(self, email: str, password: str, name: str) -> dict[str, Any]:
        """Create an account and start a session. Returns `{user, tokens}`."""
        return await self._start_session(
            "/register", {"email": email, "password": password, "name": name}
        )

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """
        Log in and store the session tokens.

        Raises:
            httpx.HTTPStatusError: For invalid credentials (401) or a rate limit (429).
        """
        return await self._start_session("/login", {"email": email, "password": password})

    async def logout(self) -> None:
        """Revoke the session's refresh tokens and forget them locally."""
        try:
            response = await self.post(f"{self.auth_path}/logout")
            response.raise_for_status()
        finally:
            self.auth.clear()

    async def profile(self) -> dict[str, Any]:
        response = await self.get(f"{self.auth_path}/profile")
        response.raise_for_status()
        return response.json()

