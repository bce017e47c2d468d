"""
Teams API Endpoints

Team lifecycle, roster management and join links. All rules live in
TeamLifecycleService; these handlers only translate HTTP to service calls.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_current_user_id, get_team_service
from app.schemas.team import (
    JoinLinkOut,
    TeamAdminOut,
    TeamCreate,
    TeamDiscoveryFilter,
    TeamOut,
    TeamSettingsUpdate,
)
from app.schemas.team_member import TeamMemberOut, TeamMemberRoleUpdate, TeamMemberWithProfile
from app.services.team_lifecycle import TeamLifecycleService

router = APIRouter()


# ==================== Team CRUD ====================

@router.post("/", response_model=TeamAdminOut, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    """
    Create a team for a challenge.

    The creator becomes the owner. Users listed in initial_members receive
    pending invitations.
    """
    return await service.create_team(current_user_id, team_data)


@router.get("/discover", response_model=List[TeamOut])
async def discover_teams(
    challenge_id: Optional[str] = Query(None),
    max_members: Optional[int] = Query(None, gt=0),
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    """
    List active public teams, most recently active first.

    Query parameters:
    - challenge_id: Only teams bound to this challenge
    - max_members: Only teams whose size cap is at most this value
    """
    filters = TeamDiscoveryFilter(challenge_id=challenge_id, max_members=max_members)
    return await service.discover_public_teams(filters)


@router.get("/{team_id}", response_model=TeamOut)
async def get_team(
    team_id: int,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    return await service.get_team(team_id)


@router.patch("/{team_id}", response_model=TeamAdminOut)
async def update_team(
    team_id: int,
    team_update: TeamSettingsUpdate,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    """
    Update team settings.

    Requires owner or admin role. Unknown fields are rejected.
    """
    return await service.update_team_settings(team_id, current_user_id, team_update)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(
    team_id: int,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    """
    Delete a team with its members, invitations, applications and
    challenge participation. Owner only.
    """
    await service.delete_team(team_id, current_user_id)


# ==================== Team Member Management ====================

@router.get("/{team_id}/members", response_model=List[TeamMemberWithProfile])
async def list_team_members(
    team_id: int,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    return await service.get_team_members(team_id, current_user_id)


@router.patch("/{team_id}/members/{user_id}", response_model=TeamMemberOut)
async def change_member_role(
    team_id: int,
    user_id: str,
    role_update: TeamMemberRoleUpdate,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    """Promote a member to admin or demote an admin. Owner or admin only."""
    return await service.change_member_role(team_id, current_user_id, user_id, role_update.role)


@router.delete("/{team_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_team_member(
    team_id: int,
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    """Remove a member. Owner or admin only; the owner cannot be removed."""
    await service.remove_member(team_id, current_user_id, user_id)


@router.post("/{team_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_team(
    team_id: int,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    await service.leave_team(team_id, current_user_id)


# ==================== Join Links ====================

@router.post("/{team_id}/join-link", response_model=JoinLinkOut)
async def issue_join_link(
    team_id: int,
    current_user_id: str = Depends(get_current_user_id),
    service: TeamLifecycleService = Depends(get_team_service),
):
    """Issue a fresh join link, invalidating the previous one."""
    team, code, link = await service.issue_join_link(team_id, current_user_id)
    return JoinLinkOut(team_id=team.id, join_code=code, join_link=link)
