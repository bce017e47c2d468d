"""
Invitation API Endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_current_user_id, get_invitation_service
from app.schemas.invitation import InvitationCreate, InvitationOut, InvitationResponse
from app.services.invitations import InvitationService

router = APIRouter()


@router.post(
    "/teams/{team_id}/invitations",
    response_model=InvitationOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_invitation(
    team_id: int,
    invitation_data: InvitationCreate,
    current_user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """
    Invite a user to the team.

    Requires owner or admin role. Fails with 409 if the team is full, the
    user is already a member, or a pending invitation already exists (its id
    is returned as existing_id).
    """
    return await service.create_invitation(
        team_id,
        current_user_id,
        invitation_data.invited_user_id,
        message=invitation_data.message,
    )


@router.get("/teams/{team_id}/invitations", response_model=List[InvitationOut])
async def list_team_invitations(
    team_id: int,
    current_user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """Pending invitations of the team. Owner or admin only."""
    return await service.list_team_invitations(team_id, current_user_id)


@router.post("/invitations/{invitation_id}/respond", response_model=InvitationOut)
async def respond_to_invitation(
    invitation_id: int,
    response: InvitationResponse,
    current_user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """Accept or decline an invitation addressed to the current user."""
    return await service.respond_to_invitation(
        invitation_id,
        current_user_id,
        response.decision,
        response_message=response.response_message,
    )
