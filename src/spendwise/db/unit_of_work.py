"""Run a service operation as one committed unit of work, retrying on races.

A wallet-scoped write either commits as a whole or leaves nothing behind.
When a concurrent writer wins (version moved, row locked, serialization
failure) the session is rolled back and the operation is re-run from
scratch so authorization and validation see fresh state.
"""

import logging
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from spendwise.config import settings
from spendwise.core.exceptions import StorageConflictError
from spendwise.models.base import Base

logger = logging.getLogger(__name__)

R = TypeVar("R")

# Driver messages that mean "another transaction holds or changed the row".
_CONFLICT_MARKERS = ("database is locked", "could not serialize", "deadlock detected")


def is_write_conflict(error: DBAPIError) -> bool:
    """Check whether a driver error is a transient write conflict."""
    message = str(error.orig if error.orig is not None else error).lower()
    return any(marker in message for marker in _CONFLICT_MARKERS)


async def _reattach(db: AsyncSession, instances: Iterable[Any]) -> None:
    # Rollback expires every loaded row; lazy loads are not possible under
    # asyncio, so reload the caller's objects before the next attempt.
    for instance in instances:
        if isinstance(instance, Base) and instance in db:
            await db.refresh(instance)


async def run_in_transaction(
    db: AsyncSession,
    operation: Callable[..., Awaitable[R]],
    *args: Any,
    attached: Iterable[Any] = (),
    **kwargs: Any,
) -> R:
    """Execute ``operation`` and commit, retrying on storage conflicts.

    Args:
        db: Session shared by the operation
        operation: Coroutine function performing reads and staged writes
        *args: Positional arguments for ``operation``
        attached: Loaded objects the operation closes over, such as the
            acting user; reloaded together with ORM instances in ``args``
            after a rolled-back attempt
        **kwargs: Keyword arguments for ``operation``

    Returns:
        Whatever ``operation`` returned, after a successful commit

    Raises:
        StorageConflictError: If every attempt lost the race
        Exception: Any other error from ``operation``, after rollback
    """
    reload = [*attached, *args, *kwargs.values()]
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(StorageConflictError),
        stop=stop_after_attempt(settings.storage_conflict_retries),
        wait=wait_exponential(multiplier=0.01, max=0.2),
        reraise=True,
    ):
        with attempt:
            try:
                result = await operation(*args, **kwargs)
                await db.commit()
            except StorageConflictError:
                await db.rollback()
                await _reattach(db, reload)
                logger.info(
                    "Write conflict, retrying",
                    extra={"attempt": attempt.retry_state.attempt_number},
                )
                raise
            except DBAPIError as e:
                await db.rollback()
                if is_write_conflict(e):
                    await _reattach(db, reload)
                    logger.info(
                        "Storage locked, retrying",
                        extra={"attempt": attempt.retry_state.attempt_number},
                    )
                    raise StorageConflictError(details={"driver_error": type(e).__name__}) from e
                raise
            except Exception:
                await db.rollback()
                await _reattach(db, reload)
                raise
    return result
