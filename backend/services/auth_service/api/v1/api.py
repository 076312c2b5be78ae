"""
API Router Aggregation for Authentication Service v1

The v1 API provides the following endpoint groups:
    - Authentication: register, login, refresh, logout, profile
    - Integrations: linked Meta / Spotify accounts

Example:
    ```python
    from services.auth_service.api.v1.api import api_router

    app.include_router(api_router, prefix="/api/v1")
    ```

Attributes:
    api_router (APIRouter): FastAPI router containing all v1 auth endpoints
"""

from fastapi import APIRouter

from services.auth_service.api.v1.endpoints import auth, integrations

api_router = APIRouter()

# Tags are used for organizing endpoints in Swagger/OpenAPI documentation
api_router.include_router(auth.router, tags=["authentication"])
api_router.include_router(integrations.router, tags=["integrations"])
