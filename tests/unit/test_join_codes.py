"""
Unit tests for join codes and join-setting transitions.
"""

from app.core.config import settings
from app.models.team import Team
from app.services.team_lifecycle import (
    JOIN_CODE_ALPHABET,
    TeamLifecycleService,
    generate_join_code,
    join_link_for,
)


def make_team(**kwargs) -> Team:
    defaults = dict(visibility="public", joinable_enabled=False, join_code=None)
    defaults.update(kwargs)
    return Team(**defaults)


class TestGenerateJoinCode:
    def test_default_length(self):
        code = generate_join_code()
        assert len(code) == settings.JOIN_CODE_LENGTH

    def test_alphanumeric(self):
        code = generate_join_code(32)
        assert all(ch in JOIN_CODE_ALPHABET for ch in code)

    def test_codes_differ(self):
        assert len({generate_join_code() for _ in range(50)}) == 50

    def test_link_embeds_code(self):
        assert join_link_for("AbC12345").endswith("/teams/join/AbC12345")


class TestApplyJoinSettings:
    def test_enabling_joinable_issues_code(self):
        team = make_team()

        TeamLifecycleService._apply_join_settings(team, {"joinable_enabled": True})

        assert team.joinable_enabled is True
        assert team.join_code is not None

    def test_disabling_joinable_revokes_code(self):
        team = make_team(joinable_enabled=True, join_code="AbC12345")

        TeamLifecycleService._apply_join_settings(team, {"joinable_enabled": False})

        assert team.joinable_enabled is False
        assert team.join_code is None

    def test_switching_to_invite_only_revokes_code(self):
        team = make_team(joinable_enabled=True, join_code="AbC12345")

        TeamLifecycleService._apply_join_settings(team, {"visibility": "invite-only"})

        assert team.visibility == "invite-only"
        assert team.joinable_enabled is False
        assert team.join_code is None

    def test_invite_only_team_cannot_become_joinable(self):
        team = make_team(visibility="invite-only")

        TeamLifecycleService._apply_join_settings(team, {"joinable_enabled": True})

        assert team.joinable_enabled is False
        assert team.join_code is None

    def test_unrelated_change_keeps_code(self):
        team = make_team(joinable_enabled=True, join_code="AbC12345")

        TeamLifecycleService._apply_join_settings(team, {"name": "New"})

        assert team.join_code == "AbC12345"
