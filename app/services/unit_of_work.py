"""
Transaction boundary for team mutations.

Each service operation passes a coroutine factory to ``run_in_transaction``.
The factory re-reads everything it needs on every attempt; a concurrent write
to the same team (stale version or unique-key race) rolls the attempt back and
replays it, up to MAX_CONTENTION_RETRIES times.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.errors import ContentionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_in_transaction(
    db: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    *,
    label: str,
    max_attempts: Optional[int] = None,
) -> T:
    """
    Run ``operation`` and commit, retrying on write conflicts.

    Args:
        db: Session the operation works on
        operation: Zero-argument coroutine factory performing the reads and writes
        label: Operation name used in log lines
        max_attempts: Override for settings.MAX_CONTENTION_RETRIES

    Returns:
        Whatever ``operation`` returned

    Raises:
        ContentionError: If every attempt hit a conflicting write
        TeamServiceError: Domain errors raised by ``operation`` (after rollback)
    """
    attempts = max_attempts or settings.MAX_CONTENTION_RETRIES

    for attempt in range(1, attempts + 1):
        try:
            result = await operation()
            await db.commit()
            return result
        except (StaleDataError, IntegrityError) as exc:
            await db.rollback()
            logger.warning(f"{label}: concurrent write detected (attempt {attempt}/{attempts}): {exc.__class__.__name__}")
        except Exception:
            await db.rollback()
            raise

    logger.error(f"{label}: giving up after {attempts} conflicting attempts")
    raise ContentionError(f"Too much concurrent activity on this team, please retry ({label})")
