"""
Standardized error handling for API responses.

This module provides the error handling system shared by the gateway and every
domain service. It keeps internal server details away from clients, gives
consistent error responses, and logs the underlying failure for debugging.

Key Features:
    - SOC2-compliant error messages (no internal details exposed)
    - Centralized error handling with consistent response format
    - Automatic logging of errors for debugging
    - Structured 429 responses for rate limiting
    - Specialized handlers for common error scenarios

Architecture:
    The module uses a two-tier error handling approach:
    1. Internal errors are logged with full details for debugging
    2. User-facing errors contain only safe, generic messages

Example:
    ```python
    from common.exceptions import APIError, handle_database_error

    try:
        user = await repo.get_by_email(email)
    except SQLAlchemyError as e:
        raise handle_database_error("fetching user", e)

    if user is None:
        raise APIError("Invalid credentials", status_code=401)
    ```
"""

import math

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from loguru import logger

# HTTP Status Code Constants
HTTP_400_BAD_REQUEST = 400
HTTP_401_UNAUTHORIZED = 401
HTTP_403_FORBIDDEN = 403
HTTP_404_NOT_FOUND = 404
HTTP_409_CONFLICT = 409
HTTP_422_UNPROCESSABLE_ENTITY = 422
HTTP_429_TOO_MANY_REQUESTS = 429
HTTP_500_INTERNAL_SERVER_ERROR = 500
HTTP_502_BAD_GATEWAY = 502
HTTP_503_SERVICE_UNAVAILABLE = 503
HTTP_504_GATEWAY_TIMEOUT = 504

RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."


class APIError(Exception):
    """
    Base exception class for API errors with user-friendly messages.

    This exception class is raised from the service layer where a failure maps
    directly onto an HTTP response. It separates user-facing messages from
    internal error details for security compliance.

    Attributes:
        message (str): User-friendly error message that can be safely exposed to clients.
        status_code (int): HTTP status code to return (default: 500).
        internal_error (Exception | None): The original exception that caused this error,
            stored for logging purposes but not exposed to clients.

    Example:
        ```python
        if not stored_token:
            raise APIError("Invalid or expired refresh token", status_code=401)
        ```

    Note:
        - The message should never contain sensitive information
        - Internal errors are logged but not included in API responses
        - Converted to `{"detail": message}` by the handler registered in
          `register_exception_handlers`
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        internal_error: Exception | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.internal_error = internal_error
        super().__init__(self.message)


class RateLimitExceededError(APIError):
    """
    Raised when a caller has used up its request quota for the current window.

    Attributes:
        retry_after (int): Seconds until the window resets. Always at least 1.
        code (str): Machine-readable error code, "RATE_LIMIT_EXCEEDED".
    """

    def __init__(self, retry_after: float, message: str = RATE_LIMIT_MESSAGE) -> None:
        super().__init__(message, status_code=HTTP_429_TOO_MANY_REQUESTS)
        self.retry_after = max(1, math.ceil(retry_after))
        self.code = RATE_LIMIT_EXCEEDED


def rate_limit_response(retry_after: int, message: str = RATE_LIMIT_MESSAGE) -> JSONResponse:
    """
    Build the structured 429 response used by every rate limiter.

    Args:
        retry_after: Seconds until the caller may retry.
        message: User-facing message.

    Returns:
        JSONResponse with body
        `{"error": {"code": "RATE_LIMIT_EXCEEDED", "message": ..., "retryAfter": ...}}`
        and a matching `Retry-After` header.
    """
    return JSONResponse(
        status_code=HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": {
                "code": RATE_LIMIT_EXCEEDED,
                "message": message,
                "retryAfter": retry_after,
            }
        },
        headers={"Retry-After": str(retry_after)},
    )


def create_api_error(
    operation: str,
    status_code: int = 500,
    internal_error: Exception | None = None,
    user_message: str | None = None,
) -> HTTPException:
    """
    Create a standardized API error response with SOC2-compliant error messages.

    This function creates a FastAPI HTTPException with a user-friendly error message
    while logging the full internal error details for debugging.

    Args:
        operation: Description of the operation that failed (e.g., "forwarding request",
            "storing metric snapshot"). Used for logging context.
        status_code: HTTP status code to return. Defaults to 500.
        internal_error: Optional original exception that caused this error. The full
            exception (including stack trace) is logged but not included in the response.
        user_message: Optional custom user-friendly message. If None, a generic message
            appropriate for the status code is used.

    Returns:
        HTTPException configured with the appropriate status code and safe error message.

    Example:
        ```python
        raise create_api_error(
            operation="updating campaign status",
            status_code=409,
            user_message="Completed campaigns cannot change status",
        )
        ```
    """
    if internal_error:
        logger.exception(f"API error in {operation}: {internal_error}")

    if user_message:
        message = user_message
    elif status_code == HTTP_400_BAD_REQUEST:
        message = "Invalid request. Please check your input and try again."
    elif status_code == HTTP_401_UNAUTHORIZED:
        message = "Authentication failed. Please check your credentials."
    elif status_code == HTTP_403_FORBIDDEN:
        message = "Access denied. You don't have permission to perform this action."
    elif status_code == HTTP_404_NOT_FOUND:
        message = "Resource not found."
    elif status_code == HTTP_409_CONFLICT:
        message = "The request conflicts with the current state of the resource."
    elif status_code == HTTP_422_UNPROCESSABLE_ENTITY:
        message = "Validation error. Please check your request parameters."
    elif status_code == HTTP_429_TOO_MANY_REQUESTS:
        message = "Rate limit exceeded. Please try again later."
    elif status_code == HTTP_502_BAD_GATEWAY:
        message = "Upstream service unavailable. Please try again later."
    elif status_code == HTTP_503_SERVICE_UNAVAILABLE:
        message = "Service temporarily unavailable. Please try again later."
    elif status_code == HTTP_504_GATEWAY_TIMEOUT:
        message = "Upstream service timed out. Please try again later."
    else:
        message = (
            "An error occurred while processing your request. Please try again later."
        )

    return HTTPException(status_code=status_code, detail=message)


def handle_database_error(operation: str, error: Exception) -> HTTPException:
    """
    Handle database-related errors with generic, safe error messages.

    Covers both the relational store (SQLAlchemy exceptions) and the metric
    store (PyMongo exceptions). Always returns status 500.

    Example:
        ```python
        try:
            campaigns = await repo.list_for_user(user.id)
        except SQLAlchemyError as e:
            raise handle_database_error("listing campaigns", e)
        ```
    """
    logger.exception(f"Database error in {operation}: {error}")
    return create_api_error(
        operation=operation,
        status_code=500,
        internal_error=error,
        user_message="Failed to retrieve data. Please try again later.",
    )


def handle_external_service_error(
    operation: str, service_name: str, error: Exception
) -> HTTPException:
    """
    Handle errors from external services with generic, safe error messages.

    Returns a 503 Service Unavailable whose message names the service so the
    caller knows which dependency failed.

    Example:
        ```python
        try:
            await metrics.ping()
        except PyMongoError as e:
            raise handle_external_service_error("checking metric store", "MongoDB", e)
        ```
    """
    logger.exception(
        f"External service error in {operation} ({service_name}): {error}"
    )
    return create_api_error(
        operation=operation,
        status_code=503,
        internal_error=error,
        user_message=f"Unable to connect to {service_name}. Please try again later.",
    )


def handle_validation_error(operation: str, error: Exception) -> HTTPException:
    """
    Handle validation errors with appropriate error messages.

    Used for documents rejected by the metric store's `$jsonSchema` validator
    and for other input validation failures. Returns 422 and logs at WARNING
    level since validation errors are expected.
    """
    logger.warning(f"Validation error in {operation}: {error}")
    return HTTPException(
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        detail="Invalid request parameters. Please check your input.",
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Render an APIError raised anywhere below the routing layer."""
    if exc.internal_error:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.internal_error}"
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def rate_limit_error_handler(
    request: Request, exc: RateLimitExceededError
) -> JSONResponse:
    """Render a RateLimitExceededError as the structured 429 body."""
    logger.warning(
        f"Rate limit exceeded for {request.method} {request.url.path}, retry in {exc.retry_after}s"
    )
    return rate_limit_response(exc.retry_after, exc.message)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the common exception handlers on an application.

    Handlers:
        - RateLimitExceededError -> 429 structured body with Retry-After
        - APIError -> `{"detail": message}` with the error's status code
    """
    app.add_exception_handler(RateLimitExceededError, rate_limit_error_handler)
    app.add_exception_handler(APIError, api_error_handler)
