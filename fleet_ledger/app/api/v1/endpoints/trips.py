"""
Trip API Endpoints.

Trip booking, status changes and the completion workflow.
"""

from fastapi import APIRouter, Depends, Path, Query, status

from fleet_ledger.app.core.dependencies import get_ledger_store
from fleet_ledger.app.core.exceptions import PartialWorkflowFailure
from fleet_ledger.app.domain.trips.trip_workflow import TripService
from fleet_ledger.app.schemas.trip import (
    CompletionExpenses, CompletionPreview, CompletionResult, TripCreate, TripResponse, TripStatusUpdate
)
from fleet_ledger.app.services.audit import record_event, AuditAction
from fleet_ledger.app.services.ledger_store import LedgerStore

router = APIRouter(prefix="/trips", tags=["Trips"])


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    payload: TripCreate,
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Book a trip.

    The trip number is assigned by the server; the distance is computed
    from coordinates when not entered.
    """
    trip = TripResponse.model_validate(await TripService.create_trip(store, payload))

    await record_event(
        db=store.db,
        action=AuditAction.TRIP_CREATED,
        entity_type="trip",
        entity_id=trip.id,
        metadata={"trip_number": trip.trip_number, "fare_amount": trip.fare_amount}
    )

    return trip


@router.patch("/{trip_id}/status", response_model=TripResponse)
async def update_trip_status(
    payload: TripStatusUpdate,
    trip_id: int = Path(..., description="Trip ID"),
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Change a trip's status.

    Allowed: created -> assigned/running/cancelled, assigned -> running/cancelled,
    running -> cancelled. Use /complete to finish a trip.
    """
    trip = TripResponse.model_validate(await TripService.transition_trip(store, trip_id, payload.status))

    await record_event(
        db=store.db,
        action=AuditAction.TRIP_STATUS_CHANGED,
        entity_type="trip",
        entity_id=trip_id,
        metadata={"new_status": payload.status.value}
    )

    return trip


@router.get("/{trip_id}/completion-preview", response_model=CompletionPreview)
async def preview_trip_completion(
    trip_id: int = Path(..., description="Trip ID"),
    fuel: float = Query(0),
    toll: float = Query(0),
    other: float = Query(0),
    store: LedgerStore = Depends(get_ledger_store)
):
    """Net profit the completion would record. Writes nothing."""
    expenses = CompletionExpenses(fuel=fuel, toll=toll, other=other)
    return await TripService.preview_completion(store, trip_id, expenses)


@router.post("/{trip_id}/complete", response_model=CompletionResult)
async def complete_trip(
    expenses: CompletionExpenses,
    trip_id: int = Path(..., description="Trip ID"),
    store: LedgerStore = Depends(get_ledger_store)
):
    """
    Complete a running trip.

    Records the fare as income and each positive trip-end cost as an
    expense. If a settlement step fails after the trip was marked completed,
    the response is ERR_WORKFLOW_PARTIAL with the per-step result.
    """
    try:
        result = await TripService.complete_trip(store, trip_id, expenses)
    except PartialWorkflowFailure as e:
        await record_event(
            db=store.db,
            action=AuditAction.TRIP_COMPLETION_PARTIAL,
            entity_type="trip",
            entity_id=trip_id,
            metadata=e.result.model_dump(mode="json")
        )
        raise

    await record_event(
        db=store.db,
        action=AuditAction.TRIP_COMPLETED,
        entity_type="trip",
        entity_id=trip_id,
        metadata={
            "net_profit": result.net_profit,
            "income_id": result.income_id,
            "expense_ids": result.expense_ids,
        }
    )

    return result
