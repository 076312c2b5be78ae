"""
Authentication API Request/Response Models

This module defines Pydantic models for request and response validation in the
authentication service API. Payloads are camelCase on the wire
(`accessToken`, `createdAt`) and snake_case in Python; either spelling is
accepted on input.

Models follow a consistent naming pattern:
    - Request models: {Action}Request (e.g., LoginRequest, RefreshRequest)
    - Response models: {Thing}Response (e.g., AuthResponse, UserResponse)

Example:
    ```python
    from services.auth_service.api.v1.models import AuthResponse, TokenPair

    response = AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenPair(access_token="...", refresh_token="..."),
    )
    response.model_dump(by_alias=True)
    # {"user": {...}, "tokens": {"accessToken": "...", "refreshToken": "..."}}
    ```
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from common.models import CamelModel


class RegisterRequest(CamelModel):
    """
    Request model for account registration.

    Attributes:
        email (EmailStr): Login email, unique across accounts.
        password (str): Plain password, at least 8 characters. Only its bcrypt
            hash is stored.
        name (str): Display name, at least 2 characters.

    Example:
        ```json
        {"email": "artist@example.com", "password": "correct-horse", "name": "Nova"}
        ```
    """

    email: EmailStr
    password: str = Field(..., min_length=8, description="Plain password, at least 8 characters")
    name: str = Field(..., min_length=2, description="Display name")


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    """
    Request model for exchanging a refresh token for a new access token.

    The token is optional at the schema level so that a missing token is
    reported as 400 "Refresh token required" rather than a validation error.
    """

    refresh_token: Optional[str] = None


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class UserResponse(CamelModel):
    """Public view of an account. Never includes the password hash."""

    id: str
    email: str
    name: str
    tier: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    user: UserResponse
    tokens: TokenPair


class MessageResponse(CamelModel):
    message: str


Provider = Literal["meta", "spotify"]


class IntegrationResponse(CamelModel):
    """
    A linked advertising or streaming account.

    Attributes:
        id (str): Internal account row id.
        provider (str): "meta" or "spotify".
        account_id (str): Platform account identifier (ad account id or artist id).
        name (str): Account or artist name shown to the user.
        connected (bool): False once the user disconnected the account.
        last_sync (datetime | None): When metrics were last pulled.
    """

    id: str
    provider: Provider
    account_id: str
    name: str
    connected: bool
    last_sync: Optional[datetime] = None
