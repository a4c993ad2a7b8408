"""
Income and expense record schemas.
"""

import datetime as dt
from pydantic import BaseModel, Field
from typing import Optional

from fleet_ledger.app.models.ledger_enums import ExpenseCategory


class IncomeCreate(BaseModel):
    """Schema for recording a payment received."""
    amount: float
    payment_date: Optional[dt.date] = None
    payment_method: Optional[str] = Field("cash", max_length=50)
    reference_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    trip_id: Optional[int] = None
    client_id: Optional[int] = None


class IncomeResponse(BaseModel):
    id: int
    amount: float
    payment_date: Optional[dt.date]
    payment_method: Optional[str]
    reference_number: Optional[str]
    notes: Optional[str]
    trip_id: Optional[int]
    client_id: Optional[int]

    class Config:
        from_attributes = True


class ExpenseCreate(BaseModel):
    """Schema for recording an expense."""
    category: ExpenseCategory
    amount: float
    expense_date: Optional[dt.date] = None
    description: Optional[str] = None
    receipt_url: Optional[str] = Field(None, max_length=500)
    trip_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None


class ExpenseResponse(BaseModel):
    id: int
    category: Optional[ExpenseCategory]
    amount: float
    expense_date: Optional[dt.date]
    description: Optional[str]
    trip_id: Optional[int]
    vehicle_id: Optional[int]
    driver_id: Optional[int]

    class Config:
        from_attributes = True
