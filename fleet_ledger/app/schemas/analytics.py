"""
Analytics Schemas.
"""

from enum import Enum
from pydantic import BaseModel
from datetime import datetime


class Granularity(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RollupBucket(BaseModel):
    """Income and expense totals over one half-open time window."""
    label: str
    start_inclusive: datetime
    end_exclusive: datetime
    income: float
    expenses: float


class CategoryAmount(BaseModel):
    """Expense total for one category (display label)."""
    category: str
    amount: float


class VehicleProfit(BaseModel):
    """Vehicle profitability."""
    vehicle_id: int
    vehicle_number: str
    trip_count: int
    profit: float


class DashboardSummary(BaseModel):
    """Headline numbers for the dashboard."""
    total_income: float
    total_expenses: float
    net_profit: float
    total_trips: int
    completed_trips: int
    pending_payments: float
    active_vehicles: int
    active_drivers: int
