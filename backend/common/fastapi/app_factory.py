"""
Common FastAPI application factory with standard middleware and configuration.

This module provides a factory function for creating FastAPI applications with
consistent configuration, middleware, and error handling across the gateway and
every domain service.

Features:
    - Automatic logging setup
    - Security headers (helmet defaults)
    - CORS configuration (environment-aware)
    - Request logging and timing middleware
    - Optional slowapi limiter applied to every route
    - Common exception handlers plus a global 500 handler
    - Health check and root endpoints
    - OpenAPI documentation

Middleware (outermost first):
    - Security headers: Added to every response, leaky server headers removed
    - CORS: Configured based on environment (dev vs production)
    - Request Timing: Adds X-Process-Time header and logs each request
    - Global rate limit: slowapi middleware, only when a limiter is passed
    - Service middleware: anything passed through `middleware`

Endpoints:
    - GET /: Root endpoint with service information
    - GET /health: Health check endpoint
    - GET /docs: Swagger UI documentation
    - GET /redoc: ReDoc documentation

Usage:
    ```python
    from common.fastapi import create_fastapi_app
    from fastapi import APIRouter

    api_router = APIRouter()

    @api_router.get("/campaigns")
    async def list_campaigns():
        return []

    app = create_fastapi_app(
        service_name="analytics-service",
        description="Campaign lifecycle and cross-platform summaries",
        api_router=api_router
    )
    ```
"""

from collections.abc import Callable, Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone
import time
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware import Middleware

from common.config import BaseServiceSettings, get_settings
from common.exceptions import register_exception_handlers
from common.fastapi.middleware import SecurityHeadersMiddleware
from common.logging import setup_logging
from common.rate_limit import global_rate_limit_exceeded_handler

DEV_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_fastapi_app(
    service_name: str,
    description: str,
    api_router: APIRouter | None = None,
    additional_setup: Callable[[FastAPI, BaseServiceSettings], None] | None = None,
    root_path: str = "",
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]] | None = None,
    limiter: Limiter | None = None,
    middleware: Sequence[Middleware] = (),
    root_info: Mapping[str, Any] | None = None,
    settings: BaseServiceSettings | None = None,
) -> FastAPI:
    """
    Create a FastAPI application with standardized configuration and middleware.

    Args:
        service_name: Name of the service (e.g., "api-gateway", "auth-service").
            Used to load service-specific settings and configure logging.
        description: Human-readable description of the service. Used in OpenAPI
            documentation and API metadata.
        api_router: Optional APIRouter with the service routes. Included with the
            API_V1_STR prefix (default: "/api/v1").
        additional_setup: Optional callback for additional application setup,
            called after all standard configuration is complete. Signature:
            `(app: FastAPI, settings: BaseServiceSettings) -> None`
        root_path: Optional root path for reverse proxy scenarios. In DEV
            environment this is automatically set to an empty string.
        lifespan: Optional lifespan context manager for startup/shutdown work
            such as opening and closing database clients.
        limiter: Optional slowapi Limiter. When given, its default limits apply
            to every route and a breach renders the structured 429 body.
        middleware: Service-specific middleware, placed innermost so that the
            standard middleware still wraps its responses.
        root_info: Extra keys merged into the `GET /` response.
        settings: Settings to use instead of loading them for `service_name`.

    Returns:
        Fully configured FastAPI application instance ready to run.

    Side Effects:
        - Configures logging for the service (via setup_logging)
        - Adds middleware to the application
        - Registers exception handlers
        - Creates health check and root endpoints

    Example with additional setup:
        ```python
        def add_auth_limit(app: FastAPI, settings: BaseServiceSettings):
            app.state.auth_rate_limit = settings.AUTH_RATE_LIMIT

        app = create_fastapi_app(
            service_name="auth-service",
            description="Authentication service",
            additional_setup=add_auth_limit
        )
        ```

    Note:
        - Starlette runs the last added middleware first, so middleware is
          registered here from the innermost layer outwards
        - All unhandled exceptions are caught and return a generic error message
    """

    # Setup logging first
    setup_logging(service_name)

    # Get service settings
    settings = settings or get_settings(service_name)

    # In development, root_path should be empty as we are not behind a reverse proxy
    effective_root_path = root_path if settings.ENVIRONMENT != "DEV" else ""

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        description=description,
        openapi_url="/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        root_path=effective_root_path,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_exception_handlers(app)

    for entry in middleware:
        app.add_middleware(entry.cls, *entry.args, **entry.kwargs)

    if limiter is not None:
        app.state.limiter = limiter
        app.add_exception_handler(RateLimitExceeded, global_rate_limit_exceeded_handler)
        app.add_middleware(SlowAPIMiddleware)

    # Add request timing middleware
    @app.middleware("http")
    async def add_process_time_header(
        request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        """Add process time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s"
        )
        return response

    # Configure CORS
    # Note: allow_credentials=True is incompatible with allow_origins=["*"]
    allowed_origins = (
        settings.CORS_ORIGINS if settings.ENVIRONMENT == "production" else DEV_CORS_ORIGINS
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(SecurityHeadersMiddleware)

    # Include API router if provided
    if api_router:
        app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "timestamp": utc_timestamp(),
        }

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint."""
        info: dict[str, Any] = {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "status": "running",
            "timestamp": utc_timestamp(),
            "docs": "/docs",
            "health": "/health",
        }
        info.update(root_info or {})
        return info

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.opt(exception=exc).error(
            f"Unhandled exception in {request.method} {request.url.path}: {exc}"
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "An error occurred while processing your request. Please try again later."
            },
        )

    if additional_setup:
        additional_setup(app, settings)

    return app
