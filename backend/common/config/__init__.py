"""
Centralized configuration management for all backend services.

This module provides a unified interface for accessing service-specific configuration
settings. It automatically selects the appropriate settings class based on the service
name, ensuring each service gets its correct configuration.

The configuration system uses Pydantic Settings, which automatically loads values from:
    1. Environment variables (highest priority)
    2. .env file in the project root
    3. Default values defined in the settings classes

Service-Specific Settings:
    - GatewaySettings: Configuration for the api-gateway
    - AuthServiceSettings: Configuration for auth-service
    - MetaServiceSettings: Configuration for meta-service
    - SpotifyServiceSettings: Configuration for spotify-service
    - AnalyticsServiceSettings: Configuration for analytics-service
    - BaseServiceSettings: Base configuration shared by all services

Example:
    ```python
    from common.config import get_settings

    settings = get_settings("api-gateway")
    print(settings.SERVICE_NAME)  # "api-gateway"
    print(settings.PORT)  # 3000
    ```
"""

from common.config.settings import (
    AnalyticsServiceSettings,
    AuthServiceSettings,
    BaseServiceSettings,
    GatewaySettings,
    MetaServiceSettings,
    SpotifyServiceSettings,
)

# First match wins
SETTINGS_BY_KEYWORD: tuple[tuple[str, type[BaseServiceSettings]], ...] = (
    ("gateway", GatewaySettings),
    ("analytics", AnalyticsServiceSettings),
    ("meta", MetaServiceSettings),
    ("spotify", SpotifyServiceSettings),
    ("auth", AuthServiceSettings),
)


def get_settings(service_name: str | None = None) -> BaseServiceSettings:
    """
    Get settings instance for the specified service.

    Matching is fuzzy and case-insensitive: the first keyword of
    SETTINGS_BY_KEYWORD contained in `service_name` picks the class, so "meta"
    and "Meta-Service" both give MetaServiceSettings. None or an unknown name
    gives BaseServiceSettings.

    Example:
        ```python
        settings = get_settings("spotify")  # Returns SpotifyServiceSettings
        settings = get_settings()  # Returns BaseServiceSettings
        ```

    Note:
        Each call returns a new instance read from the environment and .env;
        settings are not cached.
    """
    name = (service_name or "").lower()
    for keyword, settings_class in SETTINGS_BY_KEYWORD:
        if keyword in name:
            return settings_class()
    return BaseServiceSettings()


__all__ = [
    "AnalyticsServiceSettings",
    "AuthServiceSettings",
    "BaseServiceSettings",
    "GatewaySettings",
    "MetaServiceSettings",
    "SpotifyServiceSettings",
    "get_settings",
]
