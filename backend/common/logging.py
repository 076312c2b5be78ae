"""
Common logging configuration for all backend services.

This module provides centralized logging configuration using loguru, ensuring
consistent logging behavior across the gateway and every microservice. It
configures both console and file-based logging with appropriate formatting,
rotation, and retention policies.

Log Files (when LOG_TO_FILE is enabled):
    - logs/{service_name}.log: All logs at configured level (default: INFO)
    - logs/{service_name}-error.log: Only ERROR level logs

Log Rotation:
    - Error logs: Rotate at 10 MB, retain 30 days, compress with zip
    - General logs: Rotate at 50 MB, retain 7 days, compress with zip

Example:
    ```python
    from common.logging import setup_logging

    setup_logging("api-gateway")

    from loguru import logger
    logger.info("Gateway started")
    ```
"""

from pathlib import Path
import sys

from loguru import logger

from common.config import get_settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(service_name: str | None = None) -> None:
    """
    Configure logging for the application using loguru.

    Sets up a colorized console sink and, unless LOG_TO_FILE is disabled,
    service-specific rotating log files plus an error-only log file.

    Args:
        service_name: Optional name of the service (e.g., "api-gateway",
            "auth-service"). Used to pick the settings class and to name the
            log files. If None, the files are named "app".

    Side Effects:
        - Removes existing loguru handlers
        - Adds new console and file handlers
        - Creates 'logs' directory if file logging is enabled

    Note:
        This function should be called early in the application startup process.
        Calling it again replaces the handlers, so it is safe to invoke once per
        application instance.
    """

    settings = get_settings(service_name)

    # Remove default handler
    logger.remove()

    # Add console handler with custom format
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>",
        level=settings.LOG_LEVEL,
        colorize=True,
    )

    if not settings.LOG_TO_FILE:
        return

    logs_dir = Path("logs")
    logs_dir.mkdir(exist_ok=True)
    stem = service_name or "app"

    logger.add(
        logs_dir / f"{stem}-error.log",
        format=LOG_FORMAT,
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )

    logger.add(
        logs_dir / f"{stem}.log",
        format=LOG_FORMAT,
        level=settings.LOG_LEVEL,
        rotation="50 MB",
        retention="7 days",
        compression="zip",
    )
