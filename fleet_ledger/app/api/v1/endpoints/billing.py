"""
Billing API Endpoints.

Per-client bills derived from trips, payments and trip expenses.
"""

from fastapi import APIRouter, Depends, Path, Query
from typing import List, Optional

from fleet_ledger.app.core.dependencies import get_ledger_store
from fleet_ledger.app.domain.billing.billing_aggregator import BillingService
from fleet_ledger.app.schemas.billing import BillDocument, BillingSummary, ClientBill
from fleet_ledger.app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.get("/clients", response_model=List[ClientBill])
async def list_client_bills(
    client_id: Optional[int] = Query(None, description="Only this client's bill"),
    search: Optional[str] = Query(None, description="Match on client or company name"),
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    List client bills.

    Clients without trips are not billed and never appear.
    """
    return await BillingService.get_client_bills(store, client_id=client_id, search=search)


@router.get("/summary", response_model=BillingSummary)
async def get_billing_summary(store: LedgerStore = Depends(get_ledger_store)):
    """Totals billed, received and pending across all clients."""
    return await BillingService.get_billing_summary(store)


@router.get("/clients/{client_id}/document", response_model=BillDocument)
async def get_bill_document(
    client_id: int = Path(..., description="Client ID"),
    store: LedgerStore = Depends(get_ledger_store)
):
    """Bill payload for printing or sharing."""
    return await BillingService.get_bill_document(store, client_id)
