"""
Reliability Utilities.

Deadline/cancellation context carried by every ledger operation, and a
bounded runner for store calls.
"""

import time
import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_ledger.app.core.config import settings
from fleet_ledger.app.core.exceptions import OperationCancelledError, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OperationContext:
    """
    Cancellation and deadline context for a single request.

    Operations call `check()` before each store call; once the deadline has
    passed or `cancel()` was called, `check()` raises OperationCancelledError.
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self.deadline = time.monotonic() + timeout_seconds if timeout_seconds else None
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    @property
    def expired(self) -> bool:
        if self.cancelled:
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def check(self, operation: str):
        if self.expired:
            raise OperationCancelledError(operation)


async def run_store_call(step: str, awaitable: Awaitable[T], ctx: Optional[OperationContext] = None) -> T:
    """
    Await a store call bounded by the store timeout (and the context deadline,
    whichever is sooner).

    Raises:
        StoreError: on timeout or any SQLAlchemy error
    """
    timeout = settings.store_timeout_seconds
    if ctx is not None and ctx.remaining() is not None:
        timeout = min(timeout, ctx.remaining())

    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        raise StoreError(step, f"timed out after {timeout:.2f}s")
    except SQLAlchemyError as e:
        raise StoreError(step, str(e.__class__.__name__) + ": " + str(e).splitlines()[0])


async def rollback_after_failure(db: AsyncSession, step: str):
    """
    Roll back after a failed store call.

    A rollback that fails too is only logged, so the caller's original
    error stays the one that propagates.
    """
    try:
        await db.rollback()
    except SQLAlchemyError as e:
        logger.error("Rollback after failed '%s' also failed: %s", step, e)
