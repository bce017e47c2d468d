"""
Unit tests for Pydantic schemas validation.

Tests schema validation without database.
"""

import pytest
from pydantic import ValidationError

from app.schemas.application import ApplicationCreate, ApplicationReview
from app.schemas.invitation import InvitationCreate, InvitationResponse
from app.schemas.team import TeamCreate, TeamSettingsUpdate
from app.schemas.team_member import TeamMemberRoleUpdate


class TestTeamCreate:
    def test_minimal_team_create(self):
        team = TeamCreate(name="Rocket", challenge_id="challenge-1")

        assert team.name == "Rocket"
        assert team.visibility == "public"
        assert team.max_members is None
        assert team.tags == []
        assert team.initial_members == []

    def test_name_is_stripped(self):
        team = TeamCreate(name="  Rocket  ", challenge_id="challenge-1")
        assert team.name == "Rocket"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            TeamCreate(name="   ", challenge_id="challenge-1")

    def test_name_too_long_rejected(self):
        with pytest.raises(ValidationError):
            TeamCreate(name="x" * 101, challenge_id="challenge-1")

    def test_zero_max_members_rejected(self):
        with pytest.raises(ValidationError):
            TeamCreate(name="Rocket", challenge_id="challenge-1", max_members=0)

    def test_unknown_visibility_rejected(self):
        with pytest.raises(ValidationError):
            TeamCreate(name="Rocket", challenge_id="challenge-1", visibility="secret")

    def test_tags_are_trimmed_and_deduplicated(self):
        team = TeamCreate(
            name="Rocket",
            challenge_id="challenge-1",
            tags=[" ml ", "ml", "", "web"],
        )
        assert team.tags == ["ml", "web"]

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            TeamCreate(name="Rocket", challenge_id="challenge-1", current_members=3)


class TestTeamSettingsUpdate:
    def test_empty_patch_is_valid(self):
        patch = TeamSettingsUpdate()
        assert patch.model_dump(exclude_unset=True) == {}

    def test_only_set_fields_are_dumped(self):
        patch = TeamSettingsUpdate(auto_approve=True, description=None)
        assert patch.model_dump(exclude_unset=True) == {"auto_approve": True, "description": None}

    @pytest.mark.parametrize("field", ["created_by", "current_members", "join_code", "admins", "status"])
    def test_protected_fields_rejected(self, field):
        with pytest.raises(ValidationError):
            TeamSettingsUpdate(**{field: "x"})

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            TeamSettingsUpdate(name="  ")


class TestRequestSchemas:
    def test_invitation_requires_invitee(self):
        with pytest.raises(ValidationError):
            InvitationCreate(invited_user_id="")

    def test_invitation_response_decision(self):
        assert InvitationResponse(decision="accepted").decision == "accepted"
        with pytest.raises(ValidationError):
            InvitationResponse(decision="maybe")

    def test_application_defaults(self):
        application = ApplicationCreate()
        assert application.message == ""
        assert application.join_code is None

    def test_application_review_decision(self):
        with pytest.raises(ValidationError):
            ApplicationReview(decision="pending")

    def test_role_update_cannot_grant_ownership(self):
        with pytest.raises(ValidationError):
            TeamMemberRoleUpdate(role="owner")
