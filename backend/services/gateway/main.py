"""
API Gateway - FastAPI Application Entrypoint

Single HTTP entry point for SongTrackPro. Every request passes, in order,
through security headers, CORS, request logging and a global per-address rate
limit before it is forwarded to the domain service owning its path prefix:

    /auth       -> AUTH_SERVICE_URL       (default http://localhost:3001)
    /meta       -> META_SERVICE_URL       (default http://localhost:3002)
    /spotify    -> SPOTIFY_SERVICE_URL    (default http://localhost:3003)
    /analytics  -> ANALYTICS_SERVICE_URL  (default http://localhost:3004)

Any other path except `/` and `/health` answers 404 `{"error": "Not found"}`.

Example:
    To run the gateway locally:
        ```bash
        uvicorn services.gateway:app --port 3000 --reload
        ```

See Also:
    - services.gateway.proxy: Routing table and forwarding
    - common.rate_limit: Global limiter construction
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
import httpx
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.config import BaseServiceSettings, GatewaySettings
from common.fastapi import create_fastapi_app
from common.rate_limit import create_global_limiter
from services.gateway.proxy import RoutingTable, ServiceProxy

SERVICE_NAME = "api-gateway"


async def gateway_http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTP errors raised by the gateway itself as `{"error": message}`."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_gateway_app(
    settings: Optional[GatewaySettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        settings: Gateway settings; loaded from the environment if omitted.
        transport: Optional httpx transport for upstream calls (tests route
            these to in-process apps or mock handlers).
    """
    settings = settings or GatewaySettings()
    routes = RoutingTable.from_settings(settings)
    proxy = ServiceProxy(routes, timeout=settings.PROXY_TIMEOUT_SECONDS, transport=transport)
    limiter = create_global_limiter(
        settings.GLOBAL_RATE_LIMIT,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        trust_proxy_headers=settings.TRUST_PROXY_HEADERS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await proxy.aclose()

    async def forward(request: Request) -> Response:
        return await proxy.forward(request)

    def setup_proxy(app: FastAPI, _: BaseServiceSettings) -> None:
        app.state.proxy = proxy
        app.add_exception_handler(StarletteHTTPException, gateway_http_error_handler)

        # Registered last so "/", "/health" and the docs keep precedence.
        # No method list: every method is forwarded and unknown paths get a 404.
        app.add_route("/{path:path}", forward, include_in_schema=False)

    return create_fastapi_app(
        service_name=SERVICE_NAME,
        description="SongTrackPro API gateway",
        lifespan=lifespan,
        limiter=limiter,
        settings=settings,
        root_info={
            "service": "SongTrackPro API Gateway",
            "endpoints": {
                "health": "/health",
                **{prefix.lstrip("/"): prefix for prefix in sorted(routes.prefixes)},
            },
        },
        additional_setup=setup_proxy,
    )


app = create_gateway_app()
