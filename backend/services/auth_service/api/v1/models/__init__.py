"""
Authentication Service API v1 Models Package

This package exports all Pydantic models used for request/response validation
in the authentication service API v1.

Models:
    - RegisterRequest / LoginRequest / RefreshRequest: Request bodies
    - TokenPair: Access and refresh token pair
    - UserResponse: Public account view
    - AuthResponse: `{user, tokens}` returned by register and login
    - MessageResponse: Plain confirmation message
    - IntegrationResponse: Linked Meta / Spotify account
"""

from .auth import (
    AuthResponse,
    IntegrationResponse,
    LoginRequest,
    MessageResponse,
    Provider,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserResponse,
)

__all__ = [
    "AuthResponse",
    "IntegrationResponse",
    "LoginRequest",
    "MessageResponse",
    "Provider",
    "RefreshRequest",
    "RegisterRequest",
    "TokenPair",
    "UserResponse",
]
