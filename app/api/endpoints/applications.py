"""
Application API Endpoints
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from app.api.dependencies import get_application_service, get_current_user_id
from app.schemas.application import ApplicationCreate, ApplicationOut, ApplicationReview
from app.services.applications import ApplicationService

router = APIRouter()


@router.post(
    "/teams/{team_id}/applications",
    response_model=ApplicationOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_application(
    team_id: int,
    application_data: ApplicationCreate,
    current_user_id: str = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
):
    """
    Apply to join a team.

    On auto-approve teams the response already has status 'accepted' and the
    caller is a member.
    """
    return await service.create_application(
        team_id,
        current_user_id,
        message=application_data.message,
        join_code=application_data.join_code,
    )


@router.post("/teams/join/{join_code}", response_model=ApplicationOut, status_code=status.HTTP_201_CREATED)
async def join_by_link(
    join_code: str,
    message: Optional[str] = Body(None, embed=True, max_length=1000),
    current_user_id: str = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
):
    """Apply through a team's join link."""
    return await service.join_by_code(join_code, current_user_id, message=message)


@router.get("/teams/{team_id}/applications", response_model=List[ApplicationOut])
async def list_team_applications(
    team_id: int,
    status_filter: Optional[Literal["pending", "accepted", "declined"]] = Query("pending", alias="status"),
    current_user_id: str = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
):
    """Applications of the team (pending by default). Owner or admin only."""
    return await service.list_team_applications(team_id, current_user_id, status=status_filter)


@router.post("/teams/{team_id}/applications/{application_id}/review", response_model=ApplicationOut)
async def review_application(
    team_id: int,
    application_id: int,
    review: ApplicationReview,
    current_user_id: str = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
):
    """
    Accept or decline a pending application. Owner or admin only.

    Accepting a request for a full team fails with 409 and leaves the
    application pending.
    """
    return await service.review_application(team_id, application_id, current_user_id, review.decision)
