"""
Invitation subsystem: admins invite specific users, invitees accept or decline.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import (
    AlreadyMemberError,
    CapacityExceededError,
    DuplicateRequestError,
    InputValidationError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
)
from app.core.permissions import TeamAction, TeamRole, require_capability
from app.helpers.datetime_utils import is_past, utcnow
from app.models.invitation import TeamInvitation
from app.models.team import Team
from app.schemas.invitation import InvitationOut, InvitationWithDetails
from app.services.team_lifecycle import TeamLifecycleService
from app.services.unit_of_work import run_in_transaction

logger = logging.getLogger(__name__)

UNKNOWN_TEAM_NAME = "Unknown Team"
DECISIONS = ("accepted", "declined")


class InvitationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.teams = TeamLifecycleService(db)

    async def _get_invitation(self, invitation_id: int) -> TeamInvitation:
        result = await self.db.execute(
            select(TeamInvitation)
            .where(TeamInvitation.id == invitation_id)
            .execution_options(populate_existing=True)
        )
        invitation = result.scalar_one_or_none()
        if invitation is None:
            raise NotFoundError("Invitation not found")
        return invitation

    @staticmethod
    def _expire(invitation: TeamInvitation) -> None:
        invitation.status = "declined"
        invitation.responded_at = invitation.expires_at
        logger.info(f"Invitation {invitation.id} expired, marked as declined")

    async def _expire_stale(self, invitations: List[TeamInvitation]) -> List[TeamInvitation]:
        """Decline expired pending invitations in place and return the ones still open."""
        now = utcnow()
        still_pending = []
        for invitation in invitations:
            if invitation.status == "pending" and is_past(invitation.expires_at, now):
                self._expire(invitation)
            elif invitation.status == "pending":
                still_pending.append(invitation)
        await self.db.flush()
        return still_pending

    async def _find_pending(self, team_id: int, user_id: str) -> Optional[TeamInvitation]:
        result = await self.db.execute(
            select(TeamInvitation).where(
                TeamInvitation.team_id == team_id,
                TeamInvitation.invited_user_id == user_id,
                TeamInvitation.status == "pending",
            )
        )
        pending = await self._expire_stale(list(result.scalars().all()))
        return pending[0] if pending else None

    async def create_invitation(
        self,
        team_id: int,
        inviter_id: str,
        invitee_id: str,
        message: str = "",
        invitation_type: str = "direct",
    ) -> TeamInvitation:
        """
        Invite a user to a team.

        Raises:
            NotFoundError: Team does not exist
            UnauthorizedError: Inviter is not owner/admin
            InvalidStateError: Team is not active
            CapacityExceededError: Team is full
            AlreadyMemberError: Invitee is already a member
            DuplicateRequestError: A pending invitation exists (existing_id is set)
        """
        if not invitee_id:
            raise InputValidationError("invited_user_id is required")
        if invitee_id == inviter_id:
            raise InputValidationError("You cannot invite yourself")

        async def _create() -> TeamInvitation:
            team = await self.teams.lock_team(team_id)
            inviter = await self.teams.get_membership(team_id, inviter_id)
            require_capability(inviter, TeamAction.INVITE)
            return await self.create_invitation_locked(
                team, inviter_id, invitee_id, message=message, invitation_type=invitation_type
            )

        invitation = await run_in_transaction(self.db, _create, label="create_invitation")
        logger.info(f"Invitation {invitation.id}: {inviter_id} invited {invitee_id} to team {team_id}")
        return invitation

    async def create_invitation_locked(
        self,
        team: Team,
        inviter_id: str,
        invitee_id: str,
        message: str = "",
        invitation_type: str = "direct",
    ) -> TeamInvitation:
        """Write a pending invitation for a team locked by the caller's open transaction."""
        if not team.is_active:
            raise InvalidStateError(f"Team is {team.status}")
        if team.is_full:
            raise CapacityExceededError("Team is at full capacity")
        if await self.teams.get_membership(team.id, invitee_id) is not None:
            raise AlreadyMemberError("User is already a member of this team")

        existing = await self._find_pending(team.id, invitee_id)
        if existing is not None:
            raise DuplicateRequestError("Invitation already sent to this user", existing_id=existing.id)

        now = utcnow()
        invitation = TeamInvitation(
            team_id=team.id,
            invited_user_id=invitee_id,
            invited_by=inviter_id,
            message=message or "",
            status="pending",
            invitation_type=invitation_type,
            created_at=now,
            expires_at=now + timedelta(days=settings.INVITATION_TTL_DAYS),
        )
        self.db.add(invitation)
        team.last_activity = now
        await self.db.flush()
        return invitation

    async def respond_to_invitation(
        self,
        invitation_id: int,
        user_id: str,
        decision: str,
        response_message: Optional[str] = None,
    ) -> TeamInvitation:
        """
        Accept or decline an invitation.

        Accepting adds the member in the same transaction, re-checking
        capacity; if the team filled up meanwhile the invitation stays pending.
        An expired invitation is declined and InvalidStateError is raised.
        """
        if decision not in DECISIONS:
            raise InputValidationError("decision must be 'accepted' or 'declined'")

        async def _respond() -> Optional[TeamInvitation]:
            invitation = await self._get_invitation(invitation_id)
            team = await self.teams.lock_team(invitation.team_id)
            # Re-read under the team lock
            invitation = await self._get_invitation(invitation_id)

            if invitation.invited_user_id != user_id:
                raise UnauthorizedError("This invitation is not for you")
            if invitation.status != "pending":
                raise InvalidStateError("Invitation has already been processed")

            now = utcnow()
            if is_past(invitation.expires_at, now):
                self._expire(invitation)
                await self.db.flush()
                return None

            if decision == "accepted":
                await self.teams.add_member_locked(
                    team, user_id, TeamRole.MEMBER.value, invited_by=invitation.invited_by
                )
            else:
                team.last_activity = now

            invitation.status = decision
            invitation.responded_at = now
            if response_message and response_message.strip():
                invitation.response_message = response_message
            await self.db.flush()
            return invitation

        invitation = await run_in_transaction(self.db, _respond, label="respond_to_invitation")
        if invitation is None:
            raise InvalidStateError("Invitation has expired")

        logger.info(f"Invitation {invitation_id} {decision} by {user_id}")
        return invitation

    async def list_team_invitations(self, team_id: int, acting_user_id: str) -> List[TeamInvitation]:
        """Pending invitations of a team, for its admins."""
        async def _list() -> List[TeamInvitation]:
            await self.teams.get_team(team_id)
            actor = await self.teams.get_membership(team_id, acting_user_id)
            require_capability(actor, TeamAction.INVITE)

            result = await self.db.execute(
                select(TeamInvitation)
                .where(TeamInvitation.team_id == team_id, TeamInvitation.status == "pending")
                .order_by(TeamInvitation.created_at.desc())
            )
            return await self._expire_stale(list(result.scalars().all()))

        return await run_in_transaction(self.db, _list, label="list_team_invitations")

    async def get_user_invitations(self, user_id: str) -> List[InvitationWithDetails]:
        """Pending invitations addressed to a user, with team and inviter names."""
        async def _list() -> List[TeamInvitation]:
            result = await self.db.execute(
                select(TeamInvitation)
                .where(TeamInvitation.invited_user_id == user_id, TeamInvitation.status == "pending")
                .order_by(TeamInvitation.created_at.desc())
            )
            return await self._expire_stale(list(result.scalars().all()))

        invitations = await run_in_transaction(self.db, _list, label="get_user_invitations")
        if not invitations:
            return []

        team_ids = {inv.team_id for inv in invitations}
        result = await self.db.execute(select(Team.id, Team.name).where(Team.id.in_(team_ids)))
        team_names = {row.id: row.name for row in result.all()}
        inviters = await self.teams.profiles.get_profiles(inv.invited_by for inv in invitations)

        return [
            InvitationWithDetails(
                **InvitationOut.model_validate(inv).model_dump(),
                team_name=team_names.get(inv.team_id, UNKNOWN_TEAM_NAME),
                invited_by_name=inviters[inv.invited_by].name,
            )
            for inv in invitations
        ]
