"""
Ledger enumerations.
"""

import enum


class ExpenseCategory(str, enum.Enum):
    """Expense category enumeration."""
    FUEL = "fuel"
    DRIVER_SALARY = "driver_salary"
    TOLL_PARKING = "toll_parking"
    MAINTENANCE = "maintenance"
    INSURANCE = "insurance"
    PERMITS = "permits"
    MISCELLANEOUS = "miscellaneous"


class TransactionKind(str, enum.Enum):
    """Which side of the ledger a record sits on."""
    INCOME = "income"  # Money received
    EXPENSE = "expense"  # Money spent
