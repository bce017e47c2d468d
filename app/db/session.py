import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(url: str):
    return create_async_engine(url, future=True, echo=settings.SQL_ECHO, pool_pre_ping=True)


def build_session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)
SessionAsync = build_session_factory(engine)
logger.info(f"Database engine configured for dialect: {engine.dialect.name}")
