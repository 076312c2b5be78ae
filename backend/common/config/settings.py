"""
Centralized configuration management for all backend services.

This module defines Pydantic Settings classes for managing configuration across
the API gateway and every domain microservice. It provides a hierarchical
settings system with base settings shared by all services and service-specific
overrides.

Configuration Loading:
    Settings are loaded in the following priority order (highest to lowest):
    1. Environment variables
    2. .env file in the project root
    3. Default values defined in the classes

Validation:
    All settings are validated using Pydantic validators to ensure:
    - Type correctness
    - Value constraints (e.g., positive integers for pool sizes)
    - Format requirements (e.g., CORS origins parsing, rate limit strings)

Service Settings Hierarchy:
    BaseServiceSettings (base class)
    ├── GatewaySettings
    ├── AuthServiceSettings
    ├── MetaServiceSettings
    ├── SpotifyServiceSettings
    └── AnalyticsServiceSettings

Example:
    ```python
    from common.config.settings import GatewaySettings

    settings = GatewaySettings()
    print(settings.SERVICE_NAME)  # "api-gateway"
    print(settings.PORT)  # 3000
    print(settings.AUTH_SERVICE_URL)  # "http://localhost:3001"
    ```

Environment Variables:
    All settings can be overridden via environment variables. For example:
    - PORT=8080
    - AUTH_SERVICE_URL=http://auth:3001
    - LOG_LEVEL=DEBUG
    - CORS_ORIGINS=http://localhost:5173,https://app.songtrackpro.com
"""

from typing import Any

from limits import parse
from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings


class BaseServiceSettings(BaseSettings):
    """
    Base settings class providing common configuration for all services.

    This class defines all shared configuration options used across the gateway
    and the domain services, including service metadata, API configuration,
    persistence, token verification and rate limiting. Service-specific settings
    classes inherit from this base class and override or extend these settings.

    Attributes:
        SERVICE_NAME (str): Name identifier for the service. Default: "base-service"
        SERVICE_VERSION (str): Version string for the service. Default: "1.0.0"
        PORT (int): Port number the service listens on. Default: 3000

        ENVIRONMENT (str): Deployment environment ("DEV" or "production"). Default: "DEV"
        DEBUG (bool): Enable debug mode. Default: False
        LOG_LEVEL (str): Logging level. Default: "INFO"
        LOG_TO_FILE (bool): Write rotating log files under ./logs. Default: True

        API_V1_STR (str): API version prefix for routes. Default: "/api/v1"
        CORS_ORIGINS (list[str]): Allowed CORS origins (production only).

        POSTGRES_* : Relational store connection parameters.
        DATABASE_POOL_SIZE (int): Connections kept in the pool. Default: 10
        DATABASE_MAX_OVERFLOW (int): Overflow connections beyond pool size. Default: 5

        MONGODB_URI (str): MongoDB connection string for the metric store.
        MONGODB_DATABASE (str): MongoDB database name. Default: "songtrackpro"

        JWT_SECRET (str): Secret used to sign and verify access tokens.
        JWT_ALGORITHM (str): JWT signing algorithm. Default: "HS256"

        RATE_LIMIT_STORAGE_URI (str): Storage backend for rate-limit counters.
            "memory://" keeps counters per process; "redis://host:6379" shares
            them across instances.
        RATE_LIMIT_STRATEGY (str): "fixed-window" or "moving-window".
        TRUST_PROXY_HEADERS (bool): Use the last X-Forwarded-For entry, the one
            appended by the proxy in front of this process, as the client
            address. Enable only behind the gateway or a trusted proxy.

    Note:
        - CORS_ORIGINS can be set as a comma-separated string or a list
        - The JWT secret defaults are for local development only
    """

    # Service Information (defaults)
    SERVICE_NAME: str = "base-service"
    SERVICE_VERSION: str = "1.0.0"
    PORT: int = 3000

    # Global Configuration
    ENVIRONMENT: str = "DEV"  # Can be "DEV" or "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True

    # API Configuration
    API_V1_STR: str = "/api/v1"

    # CORS Configuration
    CORS_ORIGINS: Any = ""

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> list[str]:
        """
        Assemble CORS origins from string or list format.

        Accepts a comma-separated string ("http://a,http://b"), a list of
        strings, or an empty value. Whitespace around origins is stripped and
        empty entries are dropped.

        Args:
            v: Input value that can be a string, list, or other type.

        Returns:
            List of CORS origin strings. Empty list if input is empty or invalid.
        """
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, list):
            return v
        return []

    # Relational Store Configuration
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "songtrackpro"
    POSTGRES_USER: str = "songtrackpro"
    POSTGRES_PASSWORD: str = "dev_password"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 5

    # Metric Store Configuration
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "songtrackpro"

    # Token Verification
    JWT_SECRET: str = "dev-access-secret-change-me"
    JWT_ALGORITHM: str = "HS256"

    # Rate Limiting
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_STRATEGY: str = "fixed-window"
    TRUST_PROXY_HEADERS: bool = False

    @field_validator("DATABASE_POOL_SIZE", "DATABASE_MAX_OVERFLOW", mode="before")
    @classmethod
    def validate_positive_int(cls, v: Any, info: ValidationInfo) -> int | None:
        """
        Validate that database pool configuration fields are positive integers.

        Handles conversion from strings (common when loading from environment
        variables) and rejects negative values.

        Raises:
            ValueError: If the value cannot be converted to an integer or is negative.
        """
        if v is None:
            return None
        try:
            int_val = int(v)
            if int_val < 0:
                msg = f"{info.field_name} must be a positive integer"
                raise ValueError(msg)
            return int_val
        except (ValueError, TypeError) as e:
            msg = f"{info.field_name} must be a valid positive integer, got: {v}"
            raise ValueError(msg) from e

    @field_validator("RATE_LIMIT_STRATEGY")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        """Only the window strategies the rate limiter knows how to build are accepted."""
        if v not in ("fixed-window", "moving-window"):
            msg = f"RATE_LIMIT_STRATEGY must be 'fixed-window' or 'moving-window', got: {v}"
            raise ValueError(msg)
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


def _validate_rate_limit_string(v: str, field_name: str) -> str:
    try:
        parse(v)
    except ValueError as e:
        msg = f"{field_name} is not a valid rate limit string: {v!r}"
        raise ValueError(msg) from e
    return v


class GatewaySettings(BaseServiceSettings):
    """
    Settings configuration for the API gateway.

    Inherited Attributes:
        - SERVICE_NAME: "api-gateway"
        - PORT: 3000

    Additional Attributes:
        AUTH_SERVICE_URL (str): Upstream base URL for the /auth prefix.
        META_SERVICE_URL (str): Upstream base URL for the /meta prefix.
        SPOTIFY_SERVICE_URL (str): Upstream base URL for the /spotify prefix.
        ANALYTICS_SERVICE_URL (str): Upstream base URL for the /analytics prefix.
        GLOBAL_RATE_LIMIT (str): Limit applied to every request, keyed by
            client IP. Default: "100/15 minutes".
        PROXY_TIMEOUT_SECONDS (float): Upstream request timeout. Default: 30.0

    Example:
        ```python
        settings = GatewaySettings()
        print(settings.GLOBAL_RATE_LIMIT)  # "100/15 minutes"
        ```
    """

    SERVICE_NAME: str = "api-gateway"
    SERVICE_VERSION: str = "1.0.0"
    PORT: int = 3000

    # Upstream Services
    AUTH_SERVICE_URL: str = "http://localhost:3001"
    META_SERVICE_URL: str = "http://localhost:3002"
    SPOTIFY_SERVICE_URL: str = "http://localhost:3003"
    ANALYTICS_SERVICE_URL: str = "http://localhost:3004"

    GLOBAL_RATE_LIMIT: str = "100/15 minutes"
    PROXY_TIMEOUT_SECONDS: float = 30.0

    @field_validator("GLOBAL_RATE_LIMIT")
    @classmethod
    def validate_global_limit(cls, v: str, info: ValidationInfo) -> str:
        return _validate_rate_limit_string(v, info.field_name)


class AuthServiceSettings(BaseServiceSettings):
    """
    Settings configuration for the authentication service.

    Inherited Attributes:
        - SERVICE_NAME: "auth-service"
        - PORT: 3001

    Additional Attributes:
        JWT_EXPIRES_MINUTES (int): Access token lifetime. Default: 15
        JWT_REFRESH_SECRET (str): Secret used for refresh tokens. Must differ
            from JWT_SECRET so an access token can never be used to refresh.
        JWT_REFRESH_EXPIRES_DAYS (int): Refresh token lifetime. Default: 7
        AUTH_RATE_LIMIT (str): Limit on failed login/registration attempts
            per client. Default: "5/15 minutes".
        BCRYPT_ROUNDS (int): bcrypt cost factor. Default: 10
        TRUST_PROXY_HEADERS (bool): On by default; the auth service is only
            reached through the gateway, which appends the caller address.
    """

    SERVICE_NAME: str = "auth-service"
    SERVICE_VERSION: str = "1.0.0"
    PORT: int = 3001

    JWT_EXPIRES_MINUTES: int = 15
    JWT_REFRESH_SECRET: str = "dev-refresh-secret-change-me"
    JWT_REFRESH_EXPIRES_DAYS: int = 7

    AUTH_RATE_LIMIT: str = "5/15 minutes"
    BCRYPT_ROUNDS: int = 10
    TRUST_PROXY_HEADERS: bool = True

    @field_validator("AUTH_RATE_LIMIT")
    @classmethod
    def validate_auth_limit(cls, v: str, info: ValidationInfo) -> str:
        return _validate_rate_limit_string(v, info.field_name)


class MetaServiceSettings(BaseServiceSettings):
    """Settings configuration for the Meta Ads metrics service."""

    SERVICE_NAME: str = "meta-service"
    SERVICE_VERSION: str = "1.0.0"
    PORT: int = 3002


class SpotifyServiceSettings(BaseServiceSettings):
    """Settings configuration for the Spotify metrics service."""

    SERVICE_NAME: str = "spotify-service"
    SERVICE_VERSION: str = "1.0.0"
    PORT: int = 3003


class AnalyticsServiceSettings(BaseServiceSettings):
    """
    Settings configuration for the analytics service.

    The analytics service owns campaigns and reads both metric collections to
    build per-day snapshots.

    Inherited Attributes:
        - SERVICE_NAME: "analytics-service"
        - PORT: 3004

    Additional Attributes:
        MAX_SUMMARY_DAYS (int): Longest date range a summary request may span.
            Default: 366
    """

    SERVICE_NAME: str = "analytics-service"
    SERVICE_VERSION: str = "1.0.0"
    PORT: int = 3004

    MAX_SUMMARY_DAYS: int = 366
