"""
Authentication Service - FastAPI Application Entrypoint

This module serves as the main entry point for the Authentication Service, the
only service that issues tokens. Every other service verifies access tokens
locally with the shared JWT_SECRET.

It provides RESTful APIs for:

- Registration and email/password login
- Access token refresh and logout
- Profile lookup
- Linked Meta / Spotify account management

Security Model:
    - Passwords are stored as bcrypt hashes
    - Access tokens live 15 minutes, refresh tokens 7 days and are stored so
      that logout can revoke them
    - Failed login and registration attempts are limited per client address
      (AUTH_RATE_LIMIT, default 5 per 15 minutes); successful ones are not
      counted

Example:
    To run the service locally:
        ```bash
        uvicorn services.auth_service:app --port 3001 --reload
        ```

    The service will be available at:
        - API Base: http://localhost:3001/api/v1
        - Through the gateway: http://localhost:3000/auth/api/v1
        - Health Check: http://localhost:3001/health

See Also:
    - services.auth_service.api.v1.api: API router definitions
    - services.auth_service.services.auth_service: Core authentication logic
    - common.fastapi.app_factory: FastAPI application factory
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware import Middleware

from common.config import AuthServiceSettings
from common.database import dispose_engines
from common.fastapi import create_fastapi_app
from common.rate_limit import AuthRateLimitMiddleware, RateLimiter
from services.auth_service.api.v1.api import api_router

SERVICE_NAME = "auth-service"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await dispose_engines()


def create_auth_app(settings: Optional[AuthServiceSettings] = None) -> FastAPI:
    settings = settings or AuthServiceSettings()
    guarded_paths = tuple(f"{settings.API_V1_STR}{path}" for path in ("/login", "/register"))

    # The root_path="/auth" matches the gateway prefix outside DEV
    return create_fastapi_app(
        service_name=SERVICE_NAME,
        description="Authentication service for SongTrackPro",
        api_router=api_router,
        root_path="/auth",
        lifespan=lifespan,
        settings=settings,
        middleware=[
            Middleware(
                AuthRateLimitMiddleware,
                limit=settings.AUTH_RATE_LIMIT,
                paths=guarded_paths,
                limiter=RateLimiter(
                    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
                    strategy="fixed-window",
                    trust_proxy_headers=settings.TRUST_PROXY_HEADERS,
                ),
            )
        ],
    )


app = create_auth_app()
