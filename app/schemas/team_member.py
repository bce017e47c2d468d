"""
Pydantic schemas for Team Members.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict


class TeamMemberOut(BaseModel):
    """Schema for team member output"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    user_id: str
    role: str
    status: str
    joined_at: datetime
    invited_by: Optional[str] = None


class TeamMemberWithProfile(TeamMemberOut):
    """Team member with display data from the profile directory"""
    name: str
    email: str
    photo: str


class TeamMemberRoleUpdate(BaseModel):
    """Promote or demote a member (ownership is not transferable here)"""
    role: Literal["admin", "member"]


class UserTeamOut(BaseModel):
    """Reverse-index row joined with its team, for "my teams" views"""
    model_config = ConfigDict(from_attributes=True)

    team_id: int
    team_name: str
    challenge_id: str
    challenge_title: str
    role: str
    status: str
    joined_at: datetime
    current_members: int
    max_members: int
