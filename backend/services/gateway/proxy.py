"""
Prefix routing and request forwarding for the API gateway.

A request is dispatched to the upstream whose prefix is the longest one that
matches the path at a segment boundary. The prefix is stripped before
forwarding, the query string is kept, and an empty remainder becomes "/":

    /auth/api/v1/login?x=1  ->  {AUTH_SERVICE_URL}/api/v1/login?x=1
    /auth                   ->  {AUTH_SERVICE_URL}/
    /authx                  ->  no match (404)

Hop-by-hop headers are dropped in both directions, Host is rewritten to the
upstream origin and the caller's address is appended to X-Forwarded-For.
Upstream failures are not retried: a connection failure becomes a 502 and a
timeout a 504.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import Response
import httpx
from loguru import logger

from common.config import GatewaySettings
from common.exceptions import (
    HTTP_404_NOT_FOUND,
    HTTP_502_BAD_GATEWAY,
    HTTP_504_GATEWAY_TIMEOUT,
    create_api_error,
)

HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

# Recomputed for the body actually sent; httpx also decodes compressed bodies
ENTITY_HEADERS = frozenset({"content-length", "content-encoding"})


@dataclass(frozen=True)
class ServiceRoute:
    """An upstream service mounted under a path prefix."""

    prefix: str
    upstream: str

    def __post_init__(self) -> None:
        prefix = "/" + self.prefix.strip("/")
        if prefix == "/":
            raise ValueError("A service route needs a non-root prefix")
        object.__setattr__(self, "prefix", prefix)
        object.__setattr__(self, "upstream", self.upstream.rstrip("/"))

    def strip(self, path: str) -> Optional[str]:
        """Return the path with the prefix removed, or None if it does not match."""
        if path == self.prefix:
            return "/"
        if path.startswith(self.prefix + "/"):
            return path[len(self.prefix):]
        return None


class RoutingTable:
    """Longest-prefix match over a fixed set of service routes."""

    def __init__(self, routes: Iterable[ServiceRoute]) -> None:
        self.routes = sorted(routes, key=lambda route: len(route.prefix), reverse=True)

    @classmethod
    def from_settings(cls, settings: GatewaySettings) -> "RoutingTable":
        return cls(
            [
                ServiceRoute("/auth", settings.AUTH_SERVICE_URL),
                ServiceRoute("/meta", settings.META_SERVICE_URL),
                ServiceRoute("/spotify", settings.SPOTIFY_SERVICE_URL),
                ServiceRoute("/analytics", settings.ANALYTICS_SERVICE_URL),
            ]
        )

    @property
    def prefixes(self) -> list[str]:
        return [route.prefix for route in self.routes]

    def match(self, path: str) -> Optional[tuple[ServiceRoute, str]]:
        for route in self.routes:
            remainder = route.strip(path)
            if remainder is not None:
                return route, remainder
        return None


def _connection_tokens(headers: Iterable[tuple[str, str]]) -> set[str]:
    """Header names listed in Connection are hop-by-hop for this message too."""
    tokens: set[str] = set()
    for name, value in headers:
        if name.lower() == "connection":
            tokens.update(token.strip().lower() for token in value.split(",") if token.strip())
    return tokens


def filter_headers(
    headers: Iterable[tuple[str, str]], drop: Iterable[str] = ()
) -> list[tuple[str, str]]:
    """Remove hop-by-hop headers plus any names in `drop`, keeping repeated headers."""
    headers = list(headers)
    excluded = HOP_BY_HOP_HEADERS | ENTITY_HEADERS | _connection_tokens(headers)
    excluded |= {name.lower() for name in drop}
    return [(name, value) for name, value in headers if name.lower() not in excluded]


class ServiceProxy:
    """
    Forwards requests to the upstream chosen by a RoutingTable.

    Args:
        routes: Routing table to dispatch with.
        timeout: Upstream timeout in seconds.
        transport: Optional httpx transport, used by tests to stand in for the
            upstream services.
    """

    def __init__(
        self,
        routes: RoutingTable,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.routes = routes
        self.client = httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=False
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    def upstream_headers(
        self, request: Request, upstream: httpx.URL
    ) -> list[tuple[str, str]]:
        headers = filter_headers(request.headers.items(), drop=("host", "x-forwarded-for"))
        headers.append(("host", upstream.netloc.decode("ascii")))

        client_host = request.client.host if request.client else None
        forwarded_for = request.headers.get("x-forwarded-for")
        if client_host:
            forwarded_for = f"{forwarded_for}, {client_host}" if forwarded_for else client_host
        if forwarded_for:
            headers.append(("x-forwarded-for", forwarded_for))
        headers.append(("x-forwarded-host", request.headers.get("host", "")))
        headers.append(("x-forwarded-proto", request.url.scheme))
        return headers

    async def forward(self, request: Request) -> Response:
        """
        Forward a request to its upstream and relay the response.

        Raises:
            HTTPException: 404 when no prefix matches, 502 when the upstream
                cannot be reached, 504 when it does not answer in time.
        """
        match = self.routes.match(request.url.path)
        if match is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

        route, remainder = match
        url = httpx.URL(route.upstream + remainder, query=request.url.query.encode("utf-8"))
        body = await request.body()

        try:
            upstream_response = await self.client.request(
                request.method,
                url,
                headers=self.upstream_headers(request, url),
                content=body,
            )
        except httpx.TimeoutException as e:
            raise create_api_error(
                f"forwarding {request.method} {request.url.path} to {route.upstream}",
                status_code=HTTP_504_GATEWAY_TIMEOUT,
                internal_error=e,
            ) from e
        except httpx.RequestError as e:
            raise create_api_error(
                f"forwarding {request.method} {request.url.path} to {route.upstream}",
                status_code=HTTP_502_BAD_GATEWAY,
                internal_error=e,
            ) from e

        logger.debug(
            f"Proxied {request.method} {request.url.path} -> {url} ({upstream_response.status_code})"
        )

        response = Response(
            content=upstream_response.content, status_code=upstream_response.status_code
        )
        for name, value in filter_headers(upstream_response.headers.multi_items()):
            response.headers.append(name, value)
        return response
