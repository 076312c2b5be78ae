"""
JWT issuing and verification.

Access tokens and refresh tokens are both HS256 JWTs but are signed with
different secrets and carry a `type` claim, so one can never stand in for the
other.

Access token claims:
    - sub: user id
    - email: user email
    - tier: subscription tier used by the rate limiter
    - type: "access"
    - exp: expiry

Refresh token claims:
    - sub: user id
    - jti: random id, keeps two tokens issued in the same second distinct
    - type: "refresh"
    - exp: expiry
"""

from datetime import datetime, timedelta, timezone
from typing import Any
import uuid

from jose import ExpiredSignatureError, JWTError, jwt

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
DEFAULT_ALGORITHM = "HS256"


class TokenError(Exception):
    """Raised when a token cannot be decoded or has the wrong type."""


class TokenExpiredError(TokenError):
    """Raised when a token's signature is valid but it has expired."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    user_id: str,
    email: str,
    secret: str,
    expires_delta: timedelta,
    tier: str = "free",
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Create a signed access token for a user."""
    claims = {
        "sub": user_id,
        "email": email,
        "tier": tier,
        "type": ACCESS_TOKEN_TYPE,
        "exp": utc_now() + expires_delta,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def create_refresh_token(
    user_id: str,
    secret: str,
    expires_delta: timedelta,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Create a signed refresh token for a user."""
    claims = {
        "sub": user_id,
        "jti": uuid.uuid4().hex,
        "type": REFRESH_TOKEN_TYPE,
        "exp": utc_now() + expires_delta,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str,
    expected_type: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> dict[str, Any]:
    """
    Decode and verify a token.

    Args:
        token: Encoded JWT.
        secret: Secret the token was signed with.
        expected_type: "access" or "refresh".
        algorithm: Signing algorithm.

    Returns:
        The verified claims.

    Raises:
        TokenExpiredError: If the token has expired.
        TokenError: If the signature is invalid, the token is malformed, the
            `type` claim does not match, or `sub` is missing.
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except ExpiredSignatureError as e:
        raise TokenExpiredError("Token expired") from e
    except JWTError as e:
        raise TokenError("Invalid token") from e

    if claims.get("type") != expected_type:
        raise TokenError("Invalid token type")
    if not claims.get("sub"):
        raise TokenError("Token has no subject")
    return claims
