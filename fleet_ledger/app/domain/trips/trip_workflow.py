"""
Trip Workflow.

Trip creation, the status state machine, and the completion workflow that
writes a trip's settling income and expense records.

Completion is not atomic: each step commits on its own and nothing is
rolled back. The CompletionResult records which steps committed so a
caller can finish the missing ones.
"""

import logging
from typing import Dict, List, Optional, Tuple

from fleet_ledger.app.core.exceptions import (
    InputValidationError,
    InvalidTransitionError,
    OperationCancelledError,
    PartialWorkflowFailure,
    ResourceNotFoundError,
    StoreError,
)
from fleet_ledger.app.domain.ledger.values import as_amount, enum_value, ledger_now, ledger_today
from fleet_ledger.app.domain.trips.distance import resolve_distance_km
from fleet_ledger.app.models.expense import Expense
from fleet_ledger.app.models.income import Income
from fleet_ledger.app.models.ledger_enums import ExpenseCategory
from fleet_ledger.app.models.trip import Trip
from fleet_ledger.app.models.trip_enums import PaymentStatus, TripStatus
from fleet_ledger.app.schemas.trip import (
    CompletionExpenses, CompletionPreview, CompletionResult, StepOutcome, TripCreate
)
from fleet_ledger.app.services.ledger_store import LedgerStore
from fleet_ledger.app.services.refresh import refresh_notifier

logger = logging.getLogger(__name__)

# Status changes allowed through transition_trip. Completion has its own workflow.
ALLOWED_TRANSITIONS: Dict[TripStatus, Tuple[TripStatus, ...]] = {
    TripStatus.CREATED: (TripStatus.ASSIGNED, TripStatus.RUNNING, TripStatus.CANCELLED),
    TripStatus.ASSIGNED: (TripStatus.RUNNING, TripStatus.CANCELLED),
    TripStatus.RUNNING: (TripStatus.CANCELLED,),
    TripStatus.COMPLETED: (),
    TripStatus.CANCELLED: (),
}

COMPLETABLE_FROM = (TripStatus.RUNNING,)

# Completion expense field -> category of the expense it creates
COMPLETION_EXPENSES = (
    ("fuel", ExpenseCategory.FUEL),
    ("toll", ExpenseCategory.TOLL_PARKING),
    ("other", ExpenseCategory.MISCELLANEOUS),
)

UPDATE_TRIP_STEP = "update_trip"
INSERT_INCOME_STEP = "insert_income"


def trip_number_for(trip_id: int) -> str:
    return f"TRP-{trip_id:05d}"


def _require_non_negative(**amounts: float):
    for field, amount in amounts.items():
        if amount is not None and amount < 0:
            raise InputValidationError(f"{field} cannot be negative", field=field)


def _validate_completion_expenses(expenses: CompletionExpenses):
    _require_non_negative(fuel=expenses.fuel, toll=expenses.toll, other=expenses.other)


def _total_expenses(expenses: CompletionExpenses) -> float:
    return expenses.fuel + expenses.toll + expenses.other


async def _load_trip(store: LedgerStore, trip_id: int) -> Trip:
    trip = await store.get_trip(trip_id)
    if trip is None:
        raise ResourceNotFoundError("Trip", trip_id)
    return trip


class TripService:

    @staticmethod
    async def create_trip(store: LedgerStore, payload: TripCreate) -> Trip:
        """
        Book a new trip.

        The distance is derived from the coordinates unless one was entered,
        and the trip number is assigned from the new id.
        """
        _require_non_negative(
            fare_amount=payload.fare_amount,
            advance_amount=payload.advance_amount,
            distance_km=payload.distance_km,
        )

        trip = Trip(
            pickup_location=payload.pickup_location,
            drop_location=payload.drop_location,
            pickup_lat=payload.pickup_lat,
            pickup_lng=payload.pickup_lng,
            drop_lat=payload.drop_lat,
            drop_lng=payload.drop_lng,
            distance_km=resolve_distance_km(
                payload.pickup_lat, payload.pickup_lng,
                payload.drop_lat, payload.drop_lng,
                override=payload.distance_km,
            ),
            goods_type=payload.goods_type,
            vehicle_id=payload.vehicle_id,
            driver_id=payload.driver_id,
            client_id=payload.client_id,
            fare_amount=payload.fare_amount,
            advance_amount=payload.advance_amount,
            start_date=payload.start_date,
            notes=payload.notes,
            status=TripStatus.CREATED,
            payment_status=PaymentStatus.PENDING,
            trip_number="",
        )
        trip = await store.insert_trip(trip)
        trip = await store.update_trip(trip.id, {"trip_number": trip_number_for(trip.id)})

        await refresh_notifier.emit("trip_created", "trip", trip.id)
        logger.info("Created trip %s (%s -> %s)", trip.trip_number, trip.pickup_location, trip.drop_location)
        return trip

    @staticmethod
    async def transition_trip(store: LedgerStore, trip_id: int, status: TripStatus) -> Trip:
        """
        Move a trip to a new status.

        Raises:
            ResourceNotFoundError: trip does not exist
            InvalidTransitionError: the state machine forbids the change
        """
        trip = await _load_trip(store, trip_id)
        current = TripStatus(enum_value(trip.status))

        if status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(trip_id, current.value, status.value)

        patch = {"status": status}
        if status == TripStatus.RUNNING and trip.start_date is None:
            patch["start_date"] = ledger_now()

        trip = await store.update_trip(trip_id, patch)

        await refresh_notifier.emit("trip_status_changed", "trip", trip_id)
        logger.info("Trip %s moved %s -> %s", trip_id, current.value, status.value)
        return trip

    @staticmethod
    async def preview_completion(store: LedgerStore, trip_id: int,
                                 expenses: CompletionExpenses) -> CompletionPreview:
        """Net profit completion would record, without writing anything."""
        _validate_completion_expenses(expenses)
        trip = await _load_trip(store, trip_id)

        fare = as_amount(trip.fare_amount)
        total = _total_expenses(expenses)
        return CompletionPreview(
            trip_id=trip_id,
            fare_amount=fare,
            total_expenses=total,
            net_profit=fare - total,
        )

    @staticmethod
    async def complete_trip(store: LedgerStore, trip_id: int,
                            expenses: CompletionExpenses) -> CompletionResult:
        """
        Complete a running trip and record its settlement.

        Flow:
        1. Update trip (status completed, end_date now, payment completed)
        2. Insert income for the fare, when the fare is positive
        3. Insert one expense per positive fuel / toll / other amount

        Steps run in order and each commits on its own. A second submission
        after the trip update is rejected by the status check; two concurrent
        submissions that both read a running trip are not guarded.

        Raises:
            InputValidationError: negative expense amount (no store call made)
            ResourceNotFoundError: trip does not exist
            InvalidTransitionError: trip is not running
            StoreError: the trip update failed (nothing committed)
            PartialWorkflowFailure: a later step failed or the operation was
                cancelled after the trip update; carries the CompletionResult
        """
        _validate_completion_expenses(expenses)

        trip = await _load_trip(store, trip_id)
        current = TripStatus(enum_value(trip.status))
        if current not in COMPLETABLE_FROM:
            raise InvalidTransitionError(trip_id, current.value, TripStatus.COMPLETED.value)

        fare = as_amount(trip.fare_amount)
        today = ledger_today()

        steps: List[StepOutcome] = [StepOutcome(name=UPDATE_TRIP_STEP, status="not_attempted")]
        steps.append(StepOutcome(
            name=INSERT_INCOME_STEP,
            status="not_attempted" if fare > 0 else "skipped",
            amount=fare,
        ))
        for field, category in COMPLETION_EXPENSES:
            amount = getattr(expenses, field)
            steps.append(StepOutcome(
                name=f"insert_expense:{category.value}",
                status="not_attempted" if amount > 0 else "skipped",
                amount=amount,
            ))

        # Step 1: a failure here leaves the ledger untouched
        end_date = ledger_now()
        trip = await store.update_trip(trip_id, {
            "status": TripStatus.COMPLETED,
            "end_date": end_date,
            "payment_status": PaymentStatus.COMPLETED,
        })
        steps[0].status = "committed"
        steps[0].record_id = trip_id

        result = CompletionResult(
            trip_id=trip_id,
            success=False,
            status=TripStatus.COMPLETED,
            end_date=end_date,
            net_profit=fare - _total_expenses(expenses),
            steps=steps,
        )

        failed: Optional[StepOutcome] = None
        for step in result.steps[1:]:
            if step.status == "skipped":
                continue
            try:
                if step.name == INSERT_INCOME_STEP:
                    record = await store.insert_income(Income(
                        amount=fare,
                        payment_date=today,
                        trip_id=trip_id,
                        client_id=trip.client_id,
                        payment_method="cash",
                        notes=f"Trip {trip.trip_number} fare",
                    ))
                    result.income_id = record.id
                else:
                    category = ExpenseCategory(step.name.split(":", 1)[1])
                    record = await store.insert_expense(Expense(
                        category=category,
                        amount=step.amount,
                        expense_date=today,
                        trip_id=trip_id,
                        vehicle_id=trip.vehicle_id,
                        driver_id=trip.driver_id,
                        description=f"Trip {trip.trip_number} {category.value.replace('_', ' ')}",
                    ))
                    result.expense_ids.append(record.id)
            except (StoreError, OperationCancelledError) as e:
                step.status = "failed"
                step.error = e.message
                failed = step
                logger.error("Trip %s completion step '%s' failed: %s", trip_id, step.name, e.message)
                break

            step.status = "committed"
            step.record_id = record.id

        await refresh_notifier.emit("trip_completed", "trip", trip_id)

        if failed is not None:
            raise PartialWorkflowFailure(result)

        result.success = True
        logger.info("Trip %s completed, net profit %.2f", trip_id, result.net_profit)
        return result

