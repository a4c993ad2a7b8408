"""
Income database model.

Money received, optionally linked to the trip and client it settles.
"""

from sqlalchemy import Column, Integer, Float, String, Text, Date, ForeignKey, DateTime
from sqlalchemy.sql import func
from fleet_ledger.app.db.session import Base


class Income(Base):
    """Income (payment received) model."""
    __tablename__ = "income"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Linkage
    trip_id = Column(Integer, ForeignKey('trips.id'), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey('clients.id'), nullable=True, index=True)

    # Financials
    amount = Column(Float, nullable=False)
    payment_date = Column(Date, nullable=True, index=True)
    payment_method = Column(String(50), nullable=True)  # cash, bank, upi, cheque
    reference_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Income(id={self.id}, amount={self.amount}, date={self.payment_date})>"
