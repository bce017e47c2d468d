"""
Application subsystem: users ask to join, admins review (or the team auto-approves).
"""

import logging
import secrets
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    AlreadyMemberError,
    DuplicateRequestError,
    InputValidationError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
)
from app.core.permissions import TeamAction, TeamRole, require_capability
from app.helpers.datetime_utils import utcnow
from app.models.application import TeamApplication
from app.models.team import Team
from app.services.team_lifecycle import TeamLifecycleService
from app.services.unit_of_work import run_in_transaction

logger = logging.getLogger(__name__)

DECISIONS = ("accepted", "declined")
APPLICATION_STATUSES = ("pending", "accepted", "declined")


def _join_code_matches(team: Team, join_code: Optional[str]) -> bool:
    if not join_code or not team.join_code:
        return False
    return secrets.compare_digest(join_code, team.join_code)


class ApplicationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.teams = TeamLifecycleService(db)

    async def _find_pending(self, team_id: int, applicant_id: str) -> Optional[TeamApplication]:
        result = await self.db.execute(
            select(TeamApplication).where(
                TeamApplication.team_id == team_id,
                TeamApplication.applicant_id == applicant_id,
                TeamApplication.status == "pending",
            )
        )
        return result.scalars().first()

    async def create_application(
        self,
        team_id: int,
        applicant_id: str,
        message: str = "",
        join_code: Optional[str] = None,
    ) -> TeamApplication:
        """
        Apply to join a team.

        Teams that are not public only accept applications carrying the
        team's current join code. On auto-approve teams the application is
        stored as accepted and the membership is created in the same
        transaction; if the team is full neither is written.

        Raises:
            NotFoundError: Team does not exist
            InvalidStateError: Team is not active
            UnauthorizedError: Team is not public and no valid join code was given
            AlreadyMemberError: Applicant is already a member
            DuplicateRequestError: A pending application exists (existing_id is set)
            CapacityExceededError: Auto-approve team is full
        """
        async def _create() -> TeamApplication:
            team = await self.teams.lock_team(team_id)
            if not team.is_active:
                raise InvalidStateError(f"Team is {team.status}")

            via_link = _join_code_matches(team, join_code)
            if team.visibility != "public" and not via_link:
                raise UnauthorizedError("Team is not public")

            if await self.teams.get_membership(team_id, applicant_id) is not None:
                raise AlreadyMemberError("You are already a member of this team")

            existing = await self._find_pending(team_id, applicant_id)
            if existing is not None:
                raise DuplicateRequestError(
                    "You already have a pending application for this team", existing_id=existing.id
                )

            now = utcnow()
            application = TeamApplication(
                team_id=team_id,
                applicant_id=applicant_id,
                message=message or "",
                status="pending",
                via_join_link=via_link,
                created_at=now,
            )

            if team.auto_approve:
                await self.teams.add_member_locked(team, applicant_id, TeamRole.MEMBER.value)
                application.status = "accepted"
                application.reviewed_at = now
            else:
                team.last_activity = now

            self.db.add(application)
            await self.db.flush()
            return application

        application = await run_in_transaction(self.db, _create, label="create_application")
        logger.info(
            f"Application {application.id} by {applicant_id} to team {team_id} is {application.status}"
        )
        return application

    async def join_by_code(self, join_code: str, user_id: str, message: Optional[str] = None) -> TeamApplication:
        """Apply through a join link; the code identifies the team and authorizes the request."""
        result = await self.db.execute(select(Team.id).where(Team.join_code == join_code))
        team_id = result.scalar_one_or_none()
        if team_id is None:
            raise NotFoundError("Invalid or expired link")

        return await self.create_application(
            team_id, user_id, message=message or "Joined via link", join_code=join_code
        )

    async def review_application(
        self,
        team_id: int,
        application_id: int,
        reviewer_id: str,
        decision: str,
    ) -> TeamApplication:
        """
        Accept or decline a pending application.

        Accepting adds the member in the same transaction with a fresh
        capacity check; on CapacityExceededError the application stays pending.
        """
        if decision not in DECISIONS:
            raise InputValidationError("decision must be 'accepted' or 'declined'")

        async def _review() -> TeamApplication:
            team = await self.teams.lock_team(team_id)
            reviewer = await self.teams.get_membership(team_id, reviewer_id)
            require_capability(reviewer, TeamAction.REVIEW_APPLICATIONS)

            result = await self.db.execute(
                select(TeamApplication)
                .where(TeamApplication.id == application_id, TeamApplication.team_id == team_id)
                .execution_options(populate_existing=True)
            )
            application = result.scalar_one_or_none()
            if application is None:
                raise NotFoundError("Application not found")
            if application.status != "pending":
                raise InvalidStateError("Application has already been reviewed")

            now = utcnow()
            if decision == "accepted":
                await self.teams.add_member_locked(team, application.applicant_id, TeamRole.MEMBER.value)
            else:
                team.last_activity = now

            application.status = decision
            application.reviewed_at = now
            application.reviewed_by = reviewer_id
            await self.db.flush()
            return application

        application = await run_in_transaction(self.db, _review, label="review_application")
        logger.info(f"Application {application_id} for team {team_id} {decision} by {reviewer_id}")
        return application

    async def list_team_applications(
        self,
        team_id: int,
        acting_user_id: str,
        status: Optional[str] = "pending",
    ) -> List[TeamApplication]:
        if status is not None and status not in APPLICATION_STATUSES:
            raise InputValidationError(f"status must be one of {', '.join(APPLICATION_STATUSES)}")

        await self.teams.get_team(team_id)
        actor = await self.teams.get_membership(team_id, acting_user_id)
        require_capability(actor, TeamAction.REVIEW_APPLICATIONS)

        query = select(TeamApplication).where(TeamApplication.team_id == team_id)
        if status is not None:
            query = query.where(TeamApplication.status == status)
        result = await self.db.execute(query.order_by(TeamApplication.created_at.desc()))
        return list(result.scalars().all())

    async def get_user_applications(self, user_id: str) -> List[TeamApplication]:
        result = await self.db.execute(
            select(TeamApplication)
            .where(TeamApplication.applicant_id == user_id)
            .order_by(TeamApplication.created_at.desc())
        )
        return list(result.scalars().all())
