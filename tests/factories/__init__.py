"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async() method.

Usage:
    from tests.factories import ChallengeFactory, TeamFactory

    # Create challenge
    challenge = await ChallengeFactory.create_async(db_session, max_team_size=3)

    # Create team with its owner membership
    team = await TeamFactory.create_with_members_async(
        db_session, owner_id="user-1", challenge=challenge
    )
"""

from tests.factories.challenge import ChallengeFactory
from tests.factories.profile import ProfileFactory
from tests.factories.team import TeamFactory
from tests.factories.team_member import TeamMemberFactory
from tests.factories.requests import ApplicationFactory, InvitationFactory

__all__ = [
    "ChallengeFactory",
    "ProfileFactory",
    "TeamFactory",
    "TeamMemberFactory",
    "InvitationFactory",
    "ApplicationFactory",
]
