"""
Pydantic schemas for team invitations.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class InvitationCreate(BaseModel):
    """Schema for inviting a user"""
    model_config = ConfigDict(extra="forbid")

    invited_user_id: str = Field(..., min_length=1, max_length=128)
    message: str = Field("", max_length=1000)


class InvitationResponse(BaseModel):
    """Invitee's answer"""
    model_config = ConfigDict(extra="forbid")

    decision: Literal["accepted", "declined"]
    response_message: Optional[str] = Field(None, max_length=1000)


class InvitationOut(BaseModel):
    """Schema for invitation output"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    invited_user_id: str
    invited_by: str
    message: str
    status: str
    invitation_type: str
    response_message: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    responded_at: Optional[datetime] = None


class InvitationWithDetails(InvitationOut):
    """Invitation with names resolved for display"""
    team_name: str
    invited_by_name: str
