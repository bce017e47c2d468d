"""
Current-user endpoints: my teams, my invitations, my applications.
"""

from typing import List

from fastapi import APIRouter, Depends

from app.api.dependencies import (
    get_application_service,
    get_current_user_id,
    get_invitation_service,
    get_team_service,
)
from app.schemas.application import ApplicationOut
from app.schemas.invitation import InvitationWithDetails
from app.schemas.team_member import UserTeamOut
from app.services.applications import ApplicationService
from app.services.invitations import InvitationService
from app.services.team_lifecycle import TeamLifecycleService

router = APIRouter()


@router.get("/teams", response_model=List[UserTeamOut])
async def my_teams(
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    return await service.get_user_teams(current_user_id)


@router.get("/invitations", response_model=List[InvitationWithDetails])
async def my_invitations(
    current_user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
):
    """Pending invitations for the current user. Expired ones are declined on read."""
    return await service.get_user_invitations(current_user_id)


@router.get("/applications", response_model=List[ApplicationOut])
async def my_applications(
    current_user_id: str = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
):
    return await service.get_user_applications(current_user_id)
