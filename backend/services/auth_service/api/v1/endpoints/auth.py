"""
Authentication API Endpoints

This module defines the REST API endpoints for account registration, login and
session management.

Endpoints:
    POST /register
        Create an account and return `{user, tokens}` (201).

    POST /login
        Verify email and password and return `{user, tokens}`.

    POST /refresh
        Exchange a stored refresh token for a new access token.

    POST /logout
        Revoke every refresh token of the authenticated user.

    GET /profile
        Return the authenticated user's account.

Error Handling:
    - 400 Bad Request: Email already registered, refresh token missing
    - 401 Unauthorized: Invalid credentials, invalid or expired token
    - 404 Not Found: Account no longer exists
    - 422 Unprocessable Entity: Malformed request body
    - 429 Too Many Requests: Too many failed login/registration attempts

Example Usage:
    ```python
    response = await client.post(
        "/api/v1/login",
        json={"email": "artist@example.com", "password": "correct-horse"},
    )
    tokens = response.json()["tokens"]
    ```

See Also:
    - services.auth_service.services.auth_service.AuthenticationService: Core business logic
    - common.rate_limit.AuthRateLimitMiddleware: Failed-attempt limiter on login/register
"""

from fastapi import APIRouter, Depends, status

from common.security import AuthenticatedUser, get_current_user
from services.auth_service.api.dependencies import get_auth_service
from services.auth_service.api.v1.models import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserResponse,
)
from services.auth_service.services.auth_service import AuthenticationService

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Register a new account and start its first session.

    Raises:
        APIError: 400 if the email is already registered.
    """
    user, tokens = await auth_service.register(request.email, request.password, request.name)
    return AuthResponse(user=UserResponse.model_validate(user), tokens=tokens)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Log in with email and password.

    Failed attempts count against the per-address authentication limit;
    successful ones do not.

    Raises:
        APIError: 401 "Invalid credentials".
    """
    user, tokens = await auth_service.login(request.email, request.password)
    return AuthResponse(user=UserResponse.model_validate(user), tokens=tokens)


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    request: RefreshRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> TokenPair:
    """Issue a new access token for a valid refresh token."""
    return await auth_service.refresh(request.refresh_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: AuthenticatedUser = Depends(get_current_user),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.logout(current_user.id)
    return MessageResponse(message="Logged out successfully")


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> UserResponse:
    user = await auth_service.get_profile(current_user.id)
    return UserResponse.model_validate(user)
