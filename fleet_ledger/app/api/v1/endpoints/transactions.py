"""
Transactions API Endpoints.

The unified income/expense ledger and single-field edits.
"""

from datetime import date
from fastapi import APIRouter, Depends, Path, Query
from typing import List, Optional

from fleet_ledger.app.core.dependencies import get_ledger_store
from fleet_ledger.app.domain.ledger.transaction_unifier import TransactionService
from fleet_ledger.app.models.ledger_enums import TransactionKind
from fleet_ledger.app.schemas.transaction import (
    KindFilter, SortField, SortOrder, Transaction, TransactionFilter, TransactionPatch, TransactionSort
)
from fleet_ledger.app.services.audit import record_event, AuditAction
from fleet_ledger.app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=List[Transaction])
async def list_transactions(
    kind: KindFilter = Query(KindFilter.ALL),
    date_from: Optional[date] = Query(None, description="Inclusive lower bound"),
    date_to: Optional[date] = Query(None, description="Inclusive upper bound"),
    search: Optional[str] = Query(None),
    sort_by: SortField = Query(SortField.DATE),
    sort_order: SortOrder = Query(SortOrder.DESC),
    store: LedgerStore = Depends(get_ledger_store)
):
    """List income and expenses as one ledger."""
    criteria = TransactionFilter(kind=kind, date_from=date_from, date_to=date_to, search=search)
    sort = TransactionSort(sort_by=sort_by, order=sort_order)
    return await TransactionService.list_transactions(store, criteria, sort)


@router.patch("/{kind}/{transaction_id}", response_model=Transaction)
async def patch_transaction(
    patch: TransactionPatch,
    kind: TransactionKind = Path(..., description="income or expense"),
    transaction_id: int = Path(..., description="Record ID"),
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Edit one field (date, amount or description) of a ledger record.

    Other field names are ignored and the record is returned unchanged.
    """
    transaction = await TransactionService.patch_field(
        store, transaction_id, kind.value, patch.field, patch.value
    )

    await record_event(
        db=store.db,
        action=AuditAction.TRANSACTION_PATCHED,
        entity_type=kind.value,
        entity_id=transaction_id,
        metadata={"field": patch.field, "value": patch.value}
    )

    return transaction
