"""
Pydantic schemas for team applications.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class ApplicationCreate(BaseModel):
    """Schema for applying to a team"""
    model_config = ConfigDict(extra="forbid")

    message: str = Field("", max_length=1000)
    join_code: Optional[str] = Field(None, max_length=32)


class ApplicationReview(BaseModel):
    """Reviewer's decision"""
    model_config = ConfigDict(extra="forbid")

    decision: Literal["accepted", "declined"]


class ApplicationOut(BaseModel):
    """Schema for application output"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_id: int
    applicant_id: str
    message: str
    status: str
    via_join_link: bool
    created_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
