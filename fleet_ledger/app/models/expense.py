"""
Expense database model.

Money spent, tagged with a category and optionally a trip, vehicle and driver.
"""

from sqlalchemy import Column, Integer, Float, String, Text, Date, ForeignKey, DateTime, Enum
from sqlalchemy.sql import func
from fleet_ledger.app.db.session import Base
from fleet_ledger.app.models.ledger_enums import ExpenseCategory


class Expense(Base):
    """
    Expense model.

    A null category is reported as miscellaneous by the rollups.
    """
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Linkage
    trip_id = Column(Integer, ForeignKey('trips.id'), nullable=True, index=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=True, index=True)

    # Financials
    category = Column(Enum(ExpenseCategory), nullable=True, index=True)
    amount = Column(Float, nullable=False)
    expense_date = Column(Date, nullable=True, index=True)
    description = Column(Text, nullable=True)
    receipt_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Expense(id={self.id}, category='{self.category}', amount={self.amount})>"
