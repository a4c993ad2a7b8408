"""
Audit Log Database Model.

Tracks every write the ledger makes: trip completions, status changes,
transaction patches and ledger inserts.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from fleet_ledger.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for tracking ledger writes.

    Events logged:
    - TRIP_CREATED / TRIP_STATUS_CHANGED / TRIP_COMPLETED
    - TRIP_COMPLETION_PARTIAL (settlement steps failed after status update)
    - INCOME_CREATED / EXPENSE_CREATED
    - TRANSACTION_PATCHED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions)
    actor = Column(String(100), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # What it was performed on
    entity_type = Column(String(50), nullable=True, index=True)
    entity_id = Column(Integer, index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', entity={self.entity_type}:{self.entity_id})>"
