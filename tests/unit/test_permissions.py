"""
Unit tests for app/core/permissions.py

Tests the capability matrix without database.
"""

import pytest

from app.core.errors import UnauthorizedError
from app.core.permissions import (
    ROLE_CAPABILITIES,
    TeamAction,
    TeamRole,
    has_capability,
    is_admin_role,
    require_capability,
)
from app.models.team_member import TeamMember


def membership(role: str, status: str = "active") -> TeamMember:
    return TeamMember(team_id=1, user_id="user-1", role=role, status=status)


class TestOwnerCapabilities:
    """Owner can do everything."""

    @pytest.mark.parametrize("action", list(TeamAction))
    def test_owner_has_every_capability(self, action):
        assert has_capability(membership("owner"), action) is True


class TestAdminCapabilities:
    """Admin manages the team but cannot delete it."""

    @pytest.mark.parametrize(
        "action",
        [
            TeamAction.VIEW_TEAM,
            TeamAction.UPDATE_SETTINGS,
            TeamAction.INVITE,
            TeamAction.REVIEW_APPLICATIONS,
            TeamAction.REMOVE_MEMBER,
            TeamAction.MANAGE_ROLES,
            TeamAction.ISSUE_JOIN_LINK,
        ],
    )
    def test_admin_can_manage(self, action):
        assert has_capability(membership("admin"), action) is True

    def test_admin_cannot_delete_team(self):
        assert has_capability(membership("admin"), TeamAction.DELETE_TEAM) is False


class TestMemberCapabilities:
    """Member can only view."""

    def test_member_can_view(self):
        assert has_capability(membership("member"), TeamAction.VIEW_TEAM) is True

    @pytest.mark.parametrize("action", [a for a in TeamAction if a != TeamAction.VIEW_TEAM])
    def test_member_cannot_manage(self, action):
        assert has_capability(membership("member"), action) is False


class TestNonMembers:
    def test_no_membership_has_no_capabilities(self):
        assert has_capability(None, TeamAction.VIEW_TEAM) is False

    def test_inactive_membership_has_no_capabilities(self):
        assert has_capability(membership("owner", status="removed"), TeamAction.VIEW_TEAM) is False

    def test_unknown_role_has_no_capabilities(self):
        assert has_capability(membership("viewer"), TeamAction.VIEW_TEAM) is False


class TestRequireCapability:
    def test_allowed_action_passes(self):
        require_capability(membership("admin"), TeamAction.INVITE)

    def test_denied_action_raises_unauthorized(self):
        with pytest.raises(UnauthorizedError) as exc_info:
            require_capability(membership("member"), TeamAction.INVITE)

        assert "invite" in exc_info.value.message
        assert exc_info.value.status_code == 403


class TestRoleMatrix:
    def test_every_role_has_an_entry(self):
        assert set(ROLE_CAPABILITIES) == set(TeamRole)

    def test_admin_capabilities_are_subset_of_owner(self):
        assert ROLE_CAPABILITIES[TeamRole.ADMIN] < ROLE_CAPABILITIES[TeamRole.OWNER]

    def test_admin_roles(self):
        assert is_admin_role("owner") is True
        assert is_admin_role("admin") is True
        assert is_admin_role("member") is False
