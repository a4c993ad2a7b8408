"""
Ledger Entry API Endpoints.

Direct recording of payments received and expenses.
"""

from fastapi import APIRouter, Depends, status

from fleet_ledger.app.core.dependencies import get_ledger_store
from fleet_ledger.app.domain.ledger.ledger_entries import LedgerEntryService
from fleet_ledger.app.schemas.ledger import ExpenseCreate, ExpenseResponse, IncomeCreate, IncomeResponse
from fleet_ledger.app.services.audit import record_event, AuditAction
from fleet_ledger.app.services.ledger_store import LedgerStore

router = APIRouter(tags=["Ledger"])


@router.post("/income", response_model=IncomeResponse, status_code=status.HTTP_201_CREATED)
async def create_income(
    payload: IncomeCreate,
    store: LedgerStore = Depends(get_ledger_store)
):
    """Record a payment received."""
    record = IncomeResponse.model_validate(await LedgerEntryService.create_income(store, payload))

    await record_event(
        db=store.db,
        action=AuditAction.INCOME_CREATED,
        entity_type="income",
        entity_id=record.id,
        metadata={"amount": record.amount, "trip_id": record.trip_id, "client_id": record.client_id}
    )

    return record


@router.post("/expenses", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    payload: ExpenseCreate,
    store: LedgerStore = Depends(get_ledger_store)
):
    """Record an expense."""
    record = ExpenseResponse.model_validate(await LedgerEntryService.create_expense(store, payload))

    await record_event(
        db=store.db,
        action=AuditAction.EXPENSE_CREATED,
        entity_type="expense",
        entity_id=record.id,
        metadata={"amount": record.amount, "category": payload.category.value, "trip_id": record.trip_id}
    )

    return record
