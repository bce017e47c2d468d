"""
Challenge factory for test data generation.
"""

import factory
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.challenge import Challenge


class ChallengeFactory(factory.Factory):
    class Meta:
        model = Challenge

    id = factory.Sequence(lambda n: f"challenge-{n + 1}")
    title = factory.Faker("catch_phrase")
    allow_teams = True
    max_team_size = 4

    @classmethod
    async def create_async(cls, db_session: AsyncSession, **kwargs) -> Challenge:
        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        return instance
