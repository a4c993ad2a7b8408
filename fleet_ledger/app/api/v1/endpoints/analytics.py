"""
Analytics API Endpoints.

Read-only dashboard data, recomputed from the store on every request.
"""

from fastapi import APIRouter, Depends, Query
from typing import List

from fleet_ledger.app.core.dependencies import get_ledger_store
from fleet_ledger.app.domain.analytics.rollup_engine import AnalyticsService
from fleet_ledger.app.schemas.analytics import (
    CategoryAmount, DashboardSummary, Granularity, RollupBucket, VehicleProfit
)
from fleet_ledger.app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/trend", response_model=List[RollupBucket])
async def get_trend(
    granularity: Granularity = Query(Granularity.DAILY, description="Bucket width"),
    store: LedgerStore = Depends(get_ledger_store)
):
    """Income and expense totals per time bucket, oldest first."""
    return await AnalyticsService.get_trend(store, granularity)


@router.get("/expenses-by-category", response_model=List[CategoryAmount])
async def get_expenses_by_category(store: LedgerStore = Depends(get_ledger_store)):
    """Expense totals per category."""
    return await AnalyticsService.get_expenses_by_category(store)


@router.get("/vehicle-profits", response_model=List[VehicleProfit])
async def get_vehicle_profits(store: LedgerStore = Depends(get_ledger_store)):
    """Profit per vehicle (fares minus tagged expenses)."""
    return await AnalyticsService.get_vehicle_profits(store)


@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(store: LedgerStore = Depends(get_ledger_store)):
    """Headline dashboard totals."""
    return await AnalyticsService.get_dashboard_summary(store)
