"""
Authentication and authorization utilities.

Every domain service verifies access tokens locally with the shared
JWT_SECRET; only the auth service issues them.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from pydantic import BaseModel

from common.config import BaseServiceSettings, get_settings
from common.security.tokens import (
    ACCESS_TOKEN_TYPE,
    TokenError,
    TokenExpiredError,
    decode_token,
)


class AuthenticatedUser(BaseModel):
    """Model for authenticated user information."""
    id: str
    email: Optional[str] = None
    tier: str = "free"


security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@lru_cache(maxsize=1)
def default_token_settings() -> BaseServiceSettings:
    """Settings used when the app being served did not bring its own."""
    return get_settings()


def request_settings(request: Request) -> BaseServiceSettings:
    """Return the settings the serving app was built with."""
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else default_token_settings()


def authenticate_token(
    token: str, settings: Optional[BaseServiceSettings] = None
) -> AuthenticatedUser:
    """
    Verify an access token and build the user it identifies.

    Raises:
        HTTPException: 401 if the token is expired or invalid.
    """
    settings = settings or default_token_settings()
    try:
        claims = decode_token(
            token,
            settings.JWT_SECRET,
            expected_type=ACCESS_TOKEN_TYPE,
            algorithm=settings.JWT_ALGORITHM,
        )
    except TokenExpiredError as e:
        raise _unauthorized("Token expired") from e
    except TokenError as e:
        logger.debug(f"Rejected access token: {e}")
        raise _unauthorized("Invalid token") from e

    return AuthenticatedUser(
        id=claims["sub"],
        email=claims.get("email"),
        tier=claims.get("tier") or "free",
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """
    Validate the bearer token and return the authenticated user.

    Raises:
        HTTPException: 401 when no token is provided or it fails verification.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("No token provided")
    return authenticate_token(credentials.credentials, request_settings(request))


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthenticatedUser]:
    """Return the authenticated user if a valid token was sent, otherwise None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return authenticate_token(credentials.credentials, request_settings(request))
    except HTTPException:
        return None
