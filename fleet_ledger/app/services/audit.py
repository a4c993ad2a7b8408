"""
Audit logging service for tracking ledger writes.

Provides centralized audit records for every mutation the ledger performs.
"""

import logging
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from fleet_ledger.app.core.exceptions import StoreError
from fleet_ledger.app.core.reliability import rollback_after_failure, run_store_call
from fleet_ledger.app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    # Trips
    TRIP_CREATED = "TRIP_CREATED"
    TRIP_STATUS_CHANGED = "TRIP_STATUS_CHANGED"
    TRIP_COMPLETED = "TRIP_COMPLETED"
    TRIP_COMPLETION_PARTIAL = "TRIP_COMPLETION_PARTIAL"

    # Ledger
    INCOME_CREATED = "INCOME_CREATED"
    EXPENSE_CREATED = "EXPENSE_CREATED"
    TRANSACTION_PATCHED = "TRANSACTION_PATCHED"


async def log_event(
    db: AsyncSession,
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
    actor: Optional[str] = None,
) -> AuditLog:
    """
    Log a ledger event to the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        entity_type: Kind of record acted upon ("trip", "income", "expense")
        entity_id: ID of the record acted upon
        metadata: Additional context as JSON
        actor: Who triggered the action (None for system actions)

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor=actor,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_data=metadata,
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    return audit_log


async def record_event(
    db: AsyncSession,
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[AuditLog]:
    """
    Audit a ledger write that has already committed.

    A failed audit write is logged and rolled back; it never replaces the
    outcome of the write it describes. Returns None when nothing was recorded.
    """
    try:
        return await run_store_call("audit_log", log_event(db, action, entity_type, entity_id, metadata))
    except StoreError as e:
        logger.warning("Audit %s for %s:%s not recorded: %s", action, entity_type, entity_id, e.message)
        await rollback_after_failure(db, "audit_log")
        return None


async def get_audit_trail(
    db: AsyncSession,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering.

    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if entity_type:
        query = query.where(AuditLog.entity_type == entity_type)

    if entity_id:
        query = query.where(AuditLog.entity_id == entity_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
