"""
Unit-of-work helper.

Runs one read-evaluate-write sequence in its own transaction. Lost races
on versioned rows (StaleDataError) or unique keys (IntegrityError) roll back
and re-run the whole sequence, so every retry reads the latest committed state.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from .exceptions import ProgressConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFLICT_ERRORS = (IntegrityError, StaleDataError)
MAX_ATTEMPTS = 3


async def commit_with_retry(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    description: str,
    attempts: int = MAX_ATTEMPTS,
) -> T:
    """
    Run `work` and commit; retry from scratch on write conflicts.

    Args:
        db: Session the work writes through
        work: Coroutine factory doing the reads and writes
        description: Used in log messages
        attempts: Maximum number of runs

    Returns:
        Whatever `work` returned

    Raises:
        ProgressConflictError: every attempt lost a write race
        Exception: anything else `work` raised, after rollback
    """
    for attempt in range(1, attempts + 1):
        try:
            result = await work()
            await db.commit()
            return result
        except CONFLICT_ERRORS as e:
            await db.rollback()
            logger.warning(
                f"Write conflict on {description} (attempt {attempt}/{attempts}): "
                f"{type(e).__name__}"
            )
        except Exception:
            await db.rollback()
            raise

    raise ProgressConflictError(f"Gave up on {description} after {attempts} attempts")
