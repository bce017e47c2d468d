"""
Capability checks for team members.

Defines roles, team actions, and the role -> action matrix. Every service
operation asks ``has_capability`` (or ``require_capability``) instead of
comparing role strings at the call site.
"""

from enum import Enum
from typing import Dict, Optional, Set, TYPE_CHECKING

from app.core.errors import UnauthorizedError

if TYPE_CHECKING:
    from app.models.team_member import TeamMember


class TeamRole(str, Enum):
    """Roles for team members"""
    OWNER = "owner"      # Creator; exactly one per team
    ADMIN = "admin"      # Manages members and settings
    MEMBER = "member"    # Collaborates on the submission


class TeamAction(str, Enum):
    """Actions that can be performed on a team"""
    VIEW_TEAM = "view_team"
    UPDATE_SETTINGS = "update_settings"
    INVITE = "invite"
    REVIEW_APPLICATIONS = "review_applications"
    REMOVE_MEMBER = "remove_member"
    MANAGE_ROLES = "manage_roles"
    ISSUE_JOIN_LINK = "issue_join_link"
    DELETE_TEAM = "delete_team"


_ADMIN_ACTIONS: Set[TeamAction] = {
    TeamAction.VIEW_TEAM,
    TeamAction.UPDATE_SETTINGS,
    TeamAction.INVITE,
    TeamAction.REVIEW_APPLICATIONS,
    TeamAction.REMOVE_MEMBER,
    TeamAction.MANAGE_ROLES,
    TeamAction.ISSUE_JOIN_LINK,
}

ROLE_CAPABILITIES: Dict[TeamRole, Set[TeamAction]] = {
    TeamRole.OWNER: _ADMIN_ACTIONS | {TeamAction.DELETE_TEAM},
    TeamRole.ADMIN: set(_ADMIN_ACTIONS),
    TeamRole.MEMBER: {TeamAction.VIEW_TEAM},
}

# Roles that appear in Team.admins
ADMIN_ROLES = frozenset({TeamRole.OWNER, TeamRole.ADMIN})


def has_capability(membership: Optional["TeamMember"], action: TeamAction) -> bool:
    """
    Check whether a membership allows an action.

    Args:
        membership: Active TeamMember row of the caller, or None if the caller
            is not a member
        action: Action being performed

    Returns:
        True if permission is granted, False otherwise
    """
    if membership is None or membership.status != "active":
        return False
    try:
        role = TeamRole(membership.role)
    except ValueError:
        return False
    return action in ROLE_CAPABILITIES.get(role, set())


def require_capability(membership: Optional["TeamMember"], action: TeamAction) -> None:
    """Raise UnauthorizedError unless ``has_capability`` allows the action."""
    if not has_capability(membership, action):
        raise UnauthorizedError(f"Insufficient permissions: {action.value}")


def is_admin_role(role: str) -> bool:
    return role in {r.value for r in ADMIN_ROLES}
