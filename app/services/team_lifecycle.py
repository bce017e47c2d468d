"""
Team lifecycle coordinator.

The only code path that writes teams, memberships and the user -> team
reverse index. Every mutation runs inside ``run_in_transaction`` and starts by
locking the team row (``lock_team``), so the read-check-write sequences on
``current_members`` are serialized per team.

Methods ending in ``_locked`` expect the caller to hold the team lock inside
an open transaction; the invitation and application services use them to
commit their own rows together with the membership change.
"""

import logging
import secrets
import string
from typing import Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import (
    CannotLeaveAsOwnerError,
    ConsistencyError,
    InputValidationError,
    InvalidStateError,
    NotFoundError,
    OwnerProtectedError,
    CapacityExceededError,
    UnauthorizedError,
)
from app.core.logging import capture_error
from app.core.permissions import (
    TeamAction,
    TeamRole,
    has_capability,
    is_admin_role,
    require_capability,
)
from app.helpers.datetime_utils import is_past, utcnow
from app.models.application import TeamApplication
from app.models.invitation import TeamInvitation
from app.models.team import Team
from app.models.team_challenge import TeamChallenge
from app.models.team_member import TeamMember
from app.models.user_team import UserTeam
from app.schemas.team import TeamCreate, TeamDiscoveryFilter, TeamSettingsUpdate
from app.schemas.team_member import TeamMemberOut, TeamMemberWithProfile, UserTeamOut
from app.services.directory import ChallengeRegistry, ProfileDirectory
from app.services.unit_of_work import run_in_transaction

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_letters + string.digits


def generate_join_code(length: Optional[int] = None) -> str:
    length = length or settings.JOIN_CODE_LENGTH
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def join_link_for(code: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/teams/join/{code}"


class TeamLifecycleService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.challenges = ChallengeRegistry(db)
        self.profiles = ProfileDirectory(db)

    # ==================== Building blocks ====================

    async def lock_team(self, team_id: int) -> Team:
        """Load a team for writing (SELECT ... FOR UPDATE), refreshing any cached copy."""
        result = await self.db.execute(
            select(Team)
            .where(Team.id == team_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        team = result.scalar_one_or_none()
        if team is None:
            raise NotFoundError("Team not found")
        return team

    async def get_team(self, team_id: int) -> Team:
        team = await self.db.get(Team, team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    async def get_membership(self, team_id: int, user_id: str) -> Optional[TeamMember]:
        result = await self.db.execute(
            select(TeamMember)
            .where(
                TeamMember.team_id == team_id,
                TeamMember.user_id == user_id,
                TeamMember.status == "active",
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add_member_locked(
        self,
        team: Team,
        user_id: str,
        role: str,
        invited_by: Optional[str] = None,
    ) -> TeamMember:
        """
        Turn a user into an active member of a locked team.

        Idempotent: an existing membership is returned untouched and nothing
        is counted twice.

        Raises:
            InvalidStateError: Team is not active
            CapacityExceededError: Team already has max_members members
        """
        existing = await self.get_membership(team.id, user_id)
        if existing is not None:
            logger.info(f"User {user_id} is already a member of team {team.id}")
            return existing

        if not team.is_active:
            raise InvalidStateError(f"Team is {team.status}, not accepting members")
        if team.is_full:
            raise CapacityExceededError("Team is at maximum capacity")

        now = utcnow()
        member = TeamMember(
            team_id=team.id,
            user_id=user_id,
            role=role,
            status="active",
            invited_by=invited_by,
            joined_at=now,
        )
        self.db.add(member)
        self.db.add(UserTeam(user_id=user_id, team_id=team.id, role=role, status="active", joined_at=now))

        team.current_members = team.current_members + 1
        team.last_activity = now
        if is_admin_role(role) and user_id not in team.admins:
            team.admins = [*team.admins, user_id]

        await self.db.flush()
        logger.info(f"Added user {user_id} to team {team.id} as {role} ({team.current_members}/{team.max_members})")
        return member

    async def _detach_member_locked(self, team: Team, member: TeamMember) -> None:
        user_id = member.user_id
        await self.db.delete(member)
        await self.db.execute(
            delete(UserTeam).where(UserTeam.team_id == team.id, UserTeam.user_id == user_id)
        )

        team.current_members = team.current_members - 1
        team.last_activity = utcnow()
        if user_id in team.admins:
            team.admins = [admin for admin in team.admins if admin != user_id]

        await self.db.flush()
        logger.info(f"Removed user {user_id} from team {team.id} ({team.current_members}/{team.max_members})")

    async def _max_team_size(self, challenge_id: str) -> Optional[int]:
        challenge = await self.challenges.get_challenge(challenge_id)
        return challenge.max_team_size if challenge else None

    # ==================== Team lifecycle ====================

    async def create_team(self, requester_id: str, data: Union[TeamCreate, Dict]) -> Team:
        """
        Create a team bound to a challenge, with the requester as owner.

        The team, the owner membership, its reverse-index row and the
        challenge participation row commit together with a pending invitation
        for each initial member. If any invitation is rejected (a team with
        no free seat, for one) nothing is created.
        """
        data = self._validate(TeamCreate, data)

        challenge = await self.challenges.get_challenge(data.challenge_id)
        if challenge is None:
            raise NotFoundError("Challenge not found")
        if not challenge.allow_teams:
            raise InvalidStateError("This challenge does not allow teams")

        max_members = data.max_members if data.max_members is not None else challenge.max_team_size
        if max_members <= 0:
            raise InputValidationError("max_members must be greater than zero")
        if max_members > challenge.max_team_size:
            raise InputValidationError(
                f"max_members cannot exceed the challenge team size ({challenge.max_team_size})"
            )

        joinable = data.joinable_enabled and data.visibility == "public"
        invitees = [uid for uid in dict.fromkeys(data.initial_members) if uid and uid != requester_id]

        from app.services.invitations import InvitationService

        invitations = InvitationService(self.db)

        async def _create() -> Team:
            now = utcnow()
            team = Team(
                name=data.name,
                description=data.description,
                challenge_id=challenge.id,
                challenge_title=challenge.title,
                max_members=max_members,
                current_members=0,
                status="active",
                visibility=data.visibility,
                joinable_enabled=joinable,
                join_code=generate_join_code() if joinable else None,
                auto_approve=data.auto_approve,
                tags=list(data.tags),
                created_by=requester_id,
                admins=[],
                has_submitted=False,
                created_at=now,
                updated_at=now,
                last_activity=now,
            )
            self.db.add(team)
            await self.db.flush()

            await self.add_member_locked(team, requester_id, TeamRole.OWNER.value)
            self.db.add(TeamChallenge(team_id=team.id, challenge_id=challenge.id, status="active", joined_at=now))
            await self.db.flush()

            for invitee_id in invitees:
                await invitations.create_invitation_locked(
                    team,
                    requester_id,
                    invitee_id,
                    message="You have been invited to join the team",
                    invitation_type="team_creation",
                )
            return team

        team = await run_in_transaction(self.db, _create, label="create_team")
        logger.info(f"Team {team.id} '{team.name}' created by {requester_id} for challenge {team.challenge_id}")
        return team

    async def add_member(self, team_id: int, user_id: str, role: str = TeamRole.MEMBER.value) -> TeamMember:
        """
        Add a member outside of the invitation/application flows.

        Ownership is only assigned at team creation.
        """
        if role not in (TeamRole.ADMIN.value, TeamRole.MEMBER.value):
            raise InputValidationError("role must be 'admin' or 'member'")

        async def _add() -> TeamMember:
            team = await self.lock_team(team_id)
            return await self.add_member_locked(team, user_id, role)

        return await run_in_transaction(self.db, _add, label="add_member")

    async def remove_member(self, team_id: int, acting_user_id: str, target_user_id: str) -> None:
        async def _remove() -> None:
            team = await self.lock_team(team_id)
            actor = await self.get_membership(team_id, acting_user_id)
            require_capability(actor, TeamAction.REMOVE_MEMBER)

            target = await self.get_membership(team_id, target_user_id)
            if target is None:
                raise NotFoundError("Member not found in team")
            if target.is_owner:
                raise OwnerProtectedError("Cannot remove the team owner. Transfer ownership or delete the team.")

            await self._detach_member_locked(team, target)

        await run_in_transaction(self.db, _remove, label="remove_member")

    async def leave_team(self, team_id: int, user_id: str) -> None:
        async def _leave() -> None:
            team = await self.lock_team(team_id)
            member = await self.get_membership(team_id, user_id)
            if member is None:
                raise NotFoundError("You are not a member of this team")
            if member.is_owner:
                raise CannotLeaveAsOwnerError(
                    "Team owner cannot leave. Transfer ownership first or delete the team."
                )

            await self._detach_member_locked(team, member)

        await run_in_transaction(self.db, _leave, label="leave_team")

    async def change_member_role(
        self,
        team_id: int,
        acting_user_id: str,
        target_user_id: str,
        role: str,
    ) -> TeamMember:
        """Promote a member to admin or demote an admin to member."""
        if role not in (TeamRole.ADMIN.value, TeamRole.MEMBER.value):
            raise InputValidationError("role must be 'admin' or 'member'")

        async def _change() -> TeamMember:
            team = await self.lock_team(team_id)
            actor = await self.get_membership(team_id, acting_user_id)
            require_capability(actor, TeamAction.MANAGE_ROLES)

            target = await self.get_membership(team_id, target_user_id)
            if target is None:
                raise NotFoundError("Member not found in team")
            if target.is_owner:
                raise OwnerProtectedError("The owner's role cannot be changed")
            if target.role == role:
                return target

            target.role = role
            await self.db.execute(
                update(UserTeam)
                .where(UserTeam.team_id == team_id, UserTeam.user_id == target_user_id)
                .values(role=role)
            )
            if is_admin_role(role):
                if target_user_id not in team.admins:
                    team.admins = [*team.admins, target_user_id]
            else:
                team.admins = [admin for admin in team.admins if admin != target_user_id]
            team.last_activity = utcnow()

            await self.db.flush()
            logger.info(f"User {target_user_id} is now {role} of team {team_id} (changed by {acting_user_id})")
            return target

        return await run_in_transaction(self.db, _change, label="change_member_role")

    async def update_team_settings(
        self,
        team_id: int,
        acting_user_id: str,
        patch: Union[TeamSettingsUpdate, Dict],
    ) -> Team:
        patch = self._validate(TeamSettingsUpdate, patch)
        changes = patch.model_dump(exclude_unset=True)

        async def _update() -> Team:
            team = await self.lock_team(team_id)
            actor = await self.get_membership(team_id, acting_user_id)
            require_capability(actor, TeamAction.UPDATE_SETTINGS)

            new_max = changes.get("max_members")
            if new_max is not None and new_max != team.max_members:
                if new_max < team.current_members:
                    raise InputValidationError(
                        f"max_members cannot be lower than the current member count ({team.current_members})"
                    )
                cap = await self._max_team_size(team.challenge_id)
                if cap is not None and new_max > cap:
                    raise InputValidationError(f"max_members cannot exceed the challenge team size ({cap})")
                team.max_members = new_max

            for field in ("name", "auto_approve", "tags"):
                if changes.get(field) is not None:
                    setattr(team, field, changes[field])
            if "description" in changes:
                team.description = changes["description"]

            self._apply_join_settings(team, changes)

            team.updated_at = utcnow()
            await self.db.flush()
            return team

        team = await run_in_transaction(self.db, _update, label="update_team_settings")
        logger.info(f"Team {team_id} settings updated by {acting_user_id}: {sorted(changes)}")
        return team

    @staticmethod
    def _apply_join_settings(team: Team, changes: Dict) -> None:
        """Keep visibility, joinable_enabled and join_code consistent."""
        revoke = False

        visibility = changes.get("visibility")
        if visibility is not None and visibility != team.visibility:
            if visibility == "invite-only":
                revoke = True
            team.visibility = visibility

        joinable = changes.get("joinable_enabled")
        if joinable is False:
            revoke = True
        if team.visibility != "public":
            joinable = False

        if revoke:
            team.join_code = None
        if joinable is not None:
            team.joinable_enabled = joinable
        elif revoke:
            team.joinable_enabled = False

        if team.joinable_enabled and team.join_code is None:
            team.join_code = generate_join_code()

    async def issue_join_link(self, team_id: int, acting_user_id: str) -> Tuple[Team, str, str]:
        """Replace the team's join code. Returns (team, code, link)."""
        async def _issue() -> Team:
            team = await self.lock_team(team_id)
            actor = await self.get_membership(team_id, acting_user_id)
            require_capability(actor, TeamAction.ISSUE_JOIN_LINK)
            if not team.is_active:
                raise InvalidStateError(f"Team is {team.status}")

            team.join_code = generate_join_code()
            team.updated_at = utcnow()
            await self.db.flush()
            return team

        team = await run_in_transaction(self.db, _issue, label="issue_join_link")
        logger.info(f"New join link issued for team {team_id} by {acting_user_id}")
        return team, team.join_code, join_link_for(team.join_code)

    async def delete_team(self, team_id: int, acting_user_id: str) -> None:
        """
        Delete a team and everything that hangs off it.

        Children go first, the team row last, all in one transaction.
        Missing children are simply not there to delete.
        """
        async def _delete() -> None:
            team = await self.lock_team(team_id)
            actor = await self.get_membership(team_id, acting_user_id)
            require_capability(actor, TeamAction.DELETE_TEAM)

            for model in (UserTeam, TeamMember, TeamInvitation, TeamApplication, TeamChallenge):
                await self.db.execute(delete(model).where(model.team_id == team_id))

            await self.db.delete(team)
            await self.db.flush()

        await run_in_transaction(self.db, _delete, label="delete_team")
        logger.info(f"Team {team_id} deleted by {acting_user_id}")

    # ==================== Reads ====================

    async def get_team_members(self, team_id: int, viewer_id: str) -> List[TeamMemberWithProfile]:
        """
        Members of a team with display data.

        Invite-only rosters are visible to members and to users holding a
        pending invitation. A roster that disagrees with current_members is
        reported and raised, never repaired here.
        """
        team = await self.get_team(team_id)

        if team.visibility != "public":
            viewer = await self.get_membership(team_id, viewer_id)
            if not has_capability(viewer, TeamAction.VIEW_TEAM) and not await self._has_open_invitation(team_id, viewer_id):
                raise UnauthorizedError("You don't have permission to view team members")

        result = await self.db.execute(
            select(TeamMember)
            .where(TeamMember.team_id == team_id, TeamMember.status == "active")
            .order_by(TeamMember.joined_at, TeamMember.id)
        )
        members = result.scalars().all()

        if len(members) != team.current_members:
            error = ConsistencyError(
                f"Team {team_id} counts {team.current_members} members but the ledger has {len(members)}"
            )
            capture_error(
                error,
                context={"team": {"id": team_id, "current_members": team.current_members, "ledger": len(members)}},
                tags={"team_id": str(team_id)},
            )
            raise error

        profiles = await self.profiles.get_profiles(m.user_id for m in members)
        response = []
        for member in members:
            profile = profiles[member.user_id]
            response.append(
                TeamMemberWithProfile(
                    **TeamMemberOut.model_validate(member).model_dump(),
                    name=profile.name,
                    email=profile.email,
                    photo=profile.photo,
                )
            )
        return response

    async def _has_open_invitation(self, team_id: int, user_id: str) -> bool:
        result = await self.db.execute(
            select(TeamInvitation).where(
                TeamInvitation.team_id == team_id,
                TeamInvitation.invited_user_id == user_id,
                TeamInvitation.status == "pending",
            )
        )
        return any(not is_past(inv.expires_at) for inv in result.scalars().all())

    async def get_user_teams(self, user_id: str) -> List[UserTeamOut]:
        """Active teams of a user, newest membership first, from the reverse index."""
        result = await self.db.execute(
            select(UserTeam, Team)
            .join(Team, Team.id == UserTeam.team_id)
            .where(
                UserTeam.user_id == user_id,
                UserTeam.status == "active",
                Team.status == "active",
            )
            .order_by(UserTeam.joined_at.desc())
        )
        return [
            UserTeamOut(
                team_id=team.id,
                team_name=team.name,
                challenge_id=team.challenge_id,
                challenge_title=team.challenge_title,
                role=ref.role,
                status=ref.status,
                joined_at=ref.joined_at,
                current_members=team.current_members,
                max_members=team.max_members,
            )
            for ref, team in result.all()
        ]

    async def discover_public_teams(self, filters: Optional[TeamDiscoveryFilter] = None) -> List[Team]:
        filters = filters or TeamDiscoveryFilter()
        query = select(Team).where(Team.status == "active", Team.visibility == "public")

        if filters.challenge_id:
            query = query.where(Team.challenge_id == filters.challenge_id)
        if filters.max_members:
            query = query.where(Team.max_members <= filters.max_members)

        query = query.order_by(Team.last_activity.desc()).limit(settings.DISCOVERY_LIMIT)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_teams_for_challenge(self, challenge_id: str) -> List[Team]:
        result = await self.db.execute(
            select(Team)
            .where(Team.challenge_id == challenge_id, Team.status == "active")
            .order_by(Team.created_at.desc())
        )
        return list(result.scalars().all())

    # ==================== Helpers ====================

    @staticmethod
    def _validate(schema, data):
        if isinstance(data, schema):
            return data
        try:
            return schema.model_validate(data)
        except PydanticValidationError as exc:
            raise InputValidationError(str(exc)) from exc
