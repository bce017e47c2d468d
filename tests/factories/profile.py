"""
Public profile factory for test data generation.
"""

import factory
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.profile import PublicProfile


class ProfileFactory(factory.Factory):
    class Meta:
        model = PublicProfile

    user_id = factory.Sequence(lambda n: f"user-{n + 1}")
    name = factory.Faker("name")
    display_name = None
    email = factory.Faker("email")
    photo = factory.Faker("image_url")

    @classmethod
    async def create_async(cls, db_session: AsyncSession, **kwargs) -> PublicProfile:
        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        return instance
