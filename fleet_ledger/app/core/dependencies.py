"""
Request-scoped dependencies for FastAPI.

This module builds the ledger store and operation context for each request.
"""

from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_ledger.app.core.reliability import OperationContext
from fleet_ledger.app.db.session import get_db
from fleet_ledger.app.services.ledger_store import LedgerStore


async def get_operation_context(
    x_request_timeout: Optional[float] = Header(None, gt=0, description="Deadline in seconds"),
) -> OperationContext:
    """
    FastAPI dependency for the per-request cancellation context.

    Clients may bound an operation with the `X-Request-Timeout` header.
    """
    return OperationContext(timeout_seconds=x_request_timeout)


async def get_ledger_store(
    db: AsyncSession = Depends(get_db),
    ctx: OperationContext = Depends(get_operation_context),
) -> LedgerStore:
    """FastAPI dependency that binds a LedgerStore to the request's session."""
    return LedgerStore(db, ctx)
