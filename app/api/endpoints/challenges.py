from typing import List

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user_id, get_team_service
from app.schemas.team import TeamOut
from app.services.team_lifecycle import TeamLifecycleService

router = APIRouter()


@router.get("/{challenge_id}/teams", response_model=List[TeamOut])
async def list_challenge_teams(
    challenge_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    """Active teams bound to a challenge, newest first."""
    return await service.get_teams_for_challenge(challenge_id)
