"""
Common security utilities for authentication and authorization.
"""

from .auth import AuthenticatedUser, authenticate_token, get_current_user, get_optional_user
from .passwords import hash_password, verify_password
from .tokens import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenError,
    TokenExpiredError,
    create_access_token,
    create_refresh_token,
    decode_token,
)

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "AuthenticatedUser",
    "TokenError",
    "TokenExpiredError",
    "authenticate_token",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "get_current_user",
    "get_optional_user",
    "hash_password",
    "verify_password",
]
