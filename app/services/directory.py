"""
Read-only lookups against the external profile directory and challenge registry.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.challenge import Challenge
from app.models.profile import PublicProfile

logger = logging.getLogger(__name__)

UNKNOWN_USER_NAME = "Unknown User"
PLACEHOLDER_PHOTO = "/placeholder-user.svg"


@dataclass(frozen=True)
class ProfileView:
    name: str
    email: str
    photo: str


PLACEHOLDER_PROFILE = ProfileView(name=UNKNOWN_USER_NAME, email="", photo=PLACEHOLDER_PHOTO)


@dataclass(frozen=True)
class ChallengeInfo:
    id: str
    title: str
    allow_teams: bool
    max_team_size: int


class ProfileDirectory:
    """Display data for user ids. Missing profiles never fail the caller."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, ProfileView]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}

        result = await self.db.execute(select(PublicProfile).where(PublicProfile.user_id.in_(ids)))
        found = {p.user_id: p for p in result.scalars().all()}

        profiles = {}
        for user_id in ids:
            profile = found.get(user_id)
            if profile is None:
                logger.debug(f"No public profile for user {user_id}, using placeholder")
                profiles[user_id] = PLACEHOLDER_PROFILE
                continue
            profiles[user_id] = ProfileView(
                name=profile.name or profile.display_name or UNKNOWN_USER_NAME,
                email=profile.email or "",
                photo=profile.photo or PLACEHOLDER_PHOTO,
            )
        return profiles


class ChallengeRegistry:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_challenge(self, challenge_id: str) -> Optional[ChallengeInfo]:
        challenge = await self.db.get(Challenge, challenge_id)
        if challenge is None:
            return None
        return ChallengeInfo(
            id=challenge.id,
            title=challenge.title,
            allow_teams=bool(challenge.allow_teams),
            max_team_size=challenge.max_team_size,
        )
