"""
Pydantic schemas for Team entities.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

Visibility = Literal["public", "invite-only"]


def _normalize_tags(tags: List[str]) -> List[str]:
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


Tags = Annotated[List[str], AfterValidator(_normalize_tags)]


class TeamBase(BaseModel):
    """Base schema for team with common fields"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class TeamCreate(TeamBase):
    """Schema for creating a new team"""
    model_config = ConfigDict(extra="forbid")

    challenge_id: str = Field(..., min_length=1, max_length=64)
    max_members: Optional[int] = Field(None, gt=0)  # Defaults to the challenge's team size cap
    visibility: Visibility = "public"
    joinable_enabled: bool = False
    auto_approve: bool = False
    tags: Tags = Field(default_factory=list)
    initial_members: List[str] = Field(default_factory=list)  # User ids to invite


class TeamSettingsUpdate(BaseModel):
    """
    Patch for team settings.

    Only the listed fields are accepted; anything else is rejected.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    visibility: Optional[Visibility] = None
    joinable_enabled: Optional[bool] = None
    auto_approve: Optional[bool] = None
    tags: Optional[Tags] = None
    max_members: Optional[int] = Field(None, gt=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class TeamOut(TeamBase):
    """Schema for team output"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    challenge_id: str
    challenge_title: str
    max_members: int
    current_members: int
    status: str
    visibility: str
    joinable_enabled: bool
    auto_approve: bool
    tags: List[str]
    created_by: str
    admins: List[str]
    has_submitted: bool
    submitted_at: Optional[datetime] = None
    submission_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_activity: datetime


class TeamDiscoveryFilter(BaseModel):
    """Filters for public team discovery"""
    challenge_id: Optional[str] = None
    max_members: Optional[int] = Field(None, gt=0)


class JoinLinkOut(BaseModel):
    """Freshly issued join link"""
    team_id: int
    join_code: str
    join_link: str


class TeamAdminOut(TeamOut):
    """Team output for owners/admins, including the current join code"""
    join_code: Optional[str] = None
