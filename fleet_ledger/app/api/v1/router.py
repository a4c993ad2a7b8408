"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from fleet_ledger.app.api.v1.endpoints import (
    analytics, billing, transactions, trips, ledger
)

router = APIRouter()

# Ledger views
router.include_router(transactions.router)
router.include_router(ledger.router)

# Derived reports
router.include_router(analytics.router)
router.include_router(billing.router)

# Trip lifecycle
router.include_router(trips.router)
