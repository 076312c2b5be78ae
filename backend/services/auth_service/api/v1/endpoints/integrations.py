"""
Linked platform account endpoints.

Endpoints:
    GET /integrations
        List the user's Meta ad and Spotify accounts. Platform tokens are never
        included.

    DELETE /integrations/{provider}
        Disconnect "meta" or "spotify": stored tokens are cleared and the
        accounts are marked disconnected.
"""

from fastapi import APIRouter, Depends

from common.security import AuthenticatedUser, get_current_user
from services.auth_service.api.dependencies import get_auth_service
from services.auth_service.api.v1.models import IntegrationResponse, MessageResponse
from services.auth_service.services.auth_service import AuthenticationService

router = APIRouter(prefix="/integrations")


@router.get("", response_model=list[IntegrationResponse])
async def list_integrations(
    current_user: AuthenticatedUser = Depends(get_current_user),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> list[IntegrationResponse]:
    return await auth_service.list_integrations(current_user.id)


@router.delete("/{provider}", response_model=MessageResponse)
async def disconnect_integration(
    provider: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Disconnect a provider.

    Raises:
        APIError: 400 for an unknown provider, 404 if no account is linked.
    """
    await auth_service.disconnect_integration(current_user.id, provider)
    return MessageResponse(message=f"{provider.capitalize()} account disconnected")
