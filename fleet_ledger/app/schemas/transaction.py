"""
Unified ledger transaction schemas.
"""

import datetime as dt
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, model_validator

from fleet_ledger.app.models.ledger_enums import ExpenseCategory, TransactionKind


class Transaction(BaseModel):
    """
    One income or expense record in the unified ledger.

    `kind` decides which type-specific field is meaningful: expenses carry
    a category, income carries a payment method. Amounts are never negative.
    """
    id: int
    kind: TransactionKind
    date: Optional[dt.date] = None
    amount: float = Field(..., ge=0)

    # Kind-specific
    category: Optional[ExpenseCategory] = None
    payment_method: Optional[str] = None

    # Linkage
    trip_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    driver_id: Optional[int] = None
    client_id: Optional[int] = None

    description: Optional[str] = None
    reference: Optional[str] = None

    # Resolved display names
    trip_number: Optional[str] = None
    vehicle_number: Optional[str] = None
    driver_name: Optional[str] = None
    client_name: Optional[str] = None

    @model_validator(mode="after")
    def check_kind_fields(self) -> "Transaction":
        if self.kind == TransactionKind.INCOME and self.category is not None:
            raise ValueError("income transactions do not carry a category")
        if self.kind == TransactionKind.EXPENSE and self.payment_method is not None:
            raise ValueError("expense transactions do not carry a payment method")
        return self


class KindFilter(str, Enum):
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


class SortField(str, Enum):
    DATE = "date"
    AMOUNT = "amount"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TransactionFilter(BaseModel):
    """Filter for the unified ledger. Date bounds are inclusive."""
    kind: KindFilter = KindFilter.ALL
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    search: Optional[str] = None


class TransactionSort(BaseModel):
    sort_by: SortField = SortField.DATE
    order: SortOrder = SortOrder.DESC


class TransactionPatch(BaseModel):
    """
    Single-field edit of a ledger record.

    Only date, amount and description are editable; other field names are
    accepted and ignored.
    """
    field: str = Field(..., min_length=1)
    value: Union[str, float, int, None] = None
