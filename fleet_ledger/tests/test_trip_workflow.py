"""
Trip workflow tests: creation, status state machine and completion.
"""

import pytest
from sqlalchemy import select

from fleet_ledger.app.core.exceptions import (
    InputValidationError,
    InvalidTransitionError,
    OperationCancelledError,
    PartialWorkflowFailure,
    ResourceNotFoundError,
    StoreError,
)
from fleet_ledger.app.core.reliability import OperationContext
from fleet_ledger.app.domain.trips.distance import haversine_distance, resolve_distance_km
from fleet_ledger.app.domain.trips.trip_workflow import TripService
from fleet_ledger.app.models.expense import Expense
from fleet_ledger.app.models.income import Income
from fleet_ledger.app.models.ledger_enums import ExpenseCategory
from fleet_ledger.app.models.trip import Trip
from fleet_ledger.app.models.trip_enums import PaymentStatus, TripStatus
from fleet_ledger.app.schemas.trip import CompletionExpenses, TripCreate
from fleet_ledger.app.services.ledger_store import LedgerStore

PUNE = (18.5204, 73.8567)
MUMBAI = (19.0760, 72.8777)


async def make_trip(db_session, fleet, status=TripStatus.RUNNING, fare_amount=5000):
    trip = Trip(
        trip_number="TRP-00001",
        pickup_location="Pune",
        drop_location="Mumbai",
        vehicle_id=fleet["truck"].id,
        driver_id=fleet["driver"].id,
        client_id=fleet["acme"].id,
        fare_amount=fare_amount,
        status=status,
    )
    db_session.add(trip)
    await db_session.commit()
    return trip


async def ledger_rows(db_session):
    income = (await db_session.execute(select(Income))).scalars().all()
    expenses = (await db_session.execute(select(Expense).order_by(Expense.id))).scalars().all()
    return income, expenses


# --- Distance ---

def test_haversine_pune_mumbai():
    assert 115 < haversine_distance(*PUNE, *MUMBAI) < 125
    assert haversine_distance(*PUNE, *PUNE) == 0


def test_resolve_distance_prefers_override_and_needs_both_points():
    assert resolve_distance_km(*PUNE, *MUMBAI, override=150) == 150
    assert resolve_distance_km(PUNE[0], PUNE[1], None, MUMBAI[1]) is None


# --- Creation and transitions ---

@pytest.mark.asyncio
async def test_create_trip_assigns_number_and_distance(store, fleet, refresh_events):
    trip = await TripService.create_trip(store, TripCreate(
        pickup_location="Pune", drop_location="Mumbai",
        pickup_lat=PUNE[0], pickup_lng=PUNE[1], drop_lat=MUMBAI[0], drop_lng=MUMBAI[1],
        vehicle_id=fleet["truck"].id, client_id=fleet["acme"].id, fare_amount=5000,
    ))

    assert trip.trip_number == f"TRP-{trip.id:05d}"
    assert trip.status == TripStatus.CREATED
    assert trip.payment_status == PaymentStatus.PENDING
    assert 115 < trip.distance_km < 125
    assert [e["reason"] for e in refresh_events] == ["trip_created"]


@pytest.mark.asyncio
async def test_create_trip_rejects_negative_fare(store):
    with pytest.raises(InputValidationError):
        await TripService.create_trip(store, TripCreate(pickup_location="A", drop_location="B", fare_amount=-1))


@pytest.mark.asyncio
async def test_transition_path_stamps_start_date(db_session, store, fleet):
    trip = await make_trip(db_session, fleet, status=TripStatus.CREATED)

    trip = await TripService.transition_trip(store, trip.id, TripStatus.ASSIGNED)
    assert trip.status == TripStatus.ASSIGNED
    assert trip.start_date is None

    trip = await TripService.transition_trip(store, trip.id, TripStatus.RUNNING)
    assert trip.status == TripStatus.RUNNING
    assert trip.start_date is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("current, requested", [
    (TripStatus.RUNNING, TripStatus.ASSIGNED),
    (TripStatus.RUNNING, TripStatus.COMPLETED),
    (TripStatus.CREATED, TripStatus.COMPLETED),
    (TripStatus.CANCELLED, TripStatus.RUNNING),
    (TripStatus.COMPLETED, TripStatus.CANCELLED),
])
async def test_illegal_transitions(db_session, store, fleet, current, requested):
    trip = await make_trip(db_session, fleet, status=current)

    with pytest.raises(InvalidTransitionError):
        await TripService.transition_trip(store, trip.id, requested)

    assert (await store.get_trip(trip.id)).status == current


@pytest.mark.asyncio
async def test_transition_missing_trip(store):
    with pytest.raises(ResourceNotFoundError):
        await TripService.transition_trip(store, 42, TripStatus.CANCELLED)


# --- Completion ---

@pytest.mark.asyncio
async def test_preview_completion(db_session, store, fleet):
    trip = await make_trip(db_session, fleet)

    preview = await TripService.preview_completion(store, trip.id, CompletionExpenses(fuel=800, toll=200))

    assert preview.net_profit == 4000
    assert preview.total_expenses == 1000
    income, expenses = await ledger_rows(db_session)
    assert income == [] and expenses == []


@pytest.mark.asyncio
async def test_complete_trip_records_settlement(db_session, store, fleet, refresh_events):
    trip = await make_trip(db_session, fleet)

    result = await TripService.complete_trip(store, trip.id, CompletionExpenses(fuel=800, toll=200, other=0))

    assert result.success is True
    assert result.net_profit == 4000
    assert [(s.name, s.status) for s in result.steps] == [
        ("update_trip", "committed"),
        ("insert_income", "committed"),
        ("insert_expense:fuel", "committed"),
        ("insert_expense:toll_parking", "committed"),
        ("insert_expense:miscellaneous", "skipped"),
    ]

    income, expenses = await ledger_rows(db_session)
    assert [(i.amount, i.trip_id, i.client_id) for i in income] == [(5000, trip.id, fleet["acme"].id)]
    assert [(e.category, e.amount) for e in expenses] == [
        (ExpenseCategory.FUEL, 800), (ExpenseCategory.TOLL_PARKING, 200)
    ]
    assert all(e.vehicle_id == fleet["truck"].id and e.driver_id == fleet["driver"].id for e in expenses)
    assert result.income_id == income[0].id
    assert result.expense_ids == [e.id for e in expenses]

    completed = await store.get_trip(trip.id)
    assert completed.status == TripStatus.COMPLETED
    assert completed.payment_status == PaymentStatus.COMPLETED
    assert completed.end_date is not None
    assert [e["reason"] for e in refresh_events] == ["trip_completed"]


@pytest.mark.asyncio
async def test_complete_trip_without_fare_skips_income(db_session, store, fleet):
    trip = await make_trip(db_session, fleet, fare_amount=0)

    result = await TripService.complete_trip(store, trip.id, CompletionExpenses(other=50))

    assert result.success is True
    assert result.income_id is None
    assert result.steps[1].status == "skipped"
    assert result.net_profit == -50


@pytest.mark.asyncio
async def test_complete_trip_rejects_negative_expense_before_store(store, mocker):
    get_trip = mocker.spy(LedgerStore, "get_trip")

    with pytest.raises(InputValidationError):
        await TripService.complete_trip(store, 1, CompletionExpenses(fuel=-10))

    get_trip.assert_not_called()


@pytest.mark.asyncio
async def test_complete_trip_requires_running(db_session, store, fleet):
    trip = await make_trip(db_session, fleet, status=TripStatus.ASSIGNED)

    with pytest.raises(InvalidTransitionError):
        await TripService.complete_trip(store, trip.id, CompletionExpenses())

    with pytest.raises(ResourceNotFoundError):
        await TripService.complete_trip(store, 999, CompletionExpenses())


@pytest.mark.asyncio
async def test_complete_trip_partial_failure(db_session, store, fleet, mocker, refresh_events):
    trip = await make_trip(db_session, fleet)
    original_insert = LedgerStore.insert_expense

    async def flaky_insert(self, record):
        if record.category == ExpenseCategory.TOLL_PARKING:
            raise StoreError("insert_expense", "connection reset")
        return await original_insert(self, record)

    mocker.patch.object(LedgerStore, "insert_expense", flaky_insert)

    with pytest.raises(PartialWorkflowFailure) as exc_info:
        await TripService.complete_trip(store, trip.id, CompletionExpenses(fuel=800, toll=200, other=50))

    result = exc_info.value.result
    assert result.success is False
    assert [(s.name, s.status) for s in result.steps] == [
        ("update_trip", "committed"),
        ("insert_income", "committed"),
        ("insert_expense:fuel", "committed"),
        ("insert_expense:toll_parking", "failed"),
        ("insert_expense:miscellaneous", "not_attempted"),
    ]
    assert "connection reset" in result.steps[3].error
    assert exc_info.value.details["result"]["trip_id"] == trip.id

    income, expenses = await ledger_rows(db_session)
    assert len(income) == 1
    assert [e.category for e in expenses] == [ExpenseCategory.FUEL]
    assert (await store.get_trip(trip.id)).status == TripStatus.COMPLETED
    assert len(refresh_events) == 1


@pytest.mark.asyncio
async def test_complete_trip_update_failure_commits_nothing(db_session, store, fleet, mocker, refresh_events):
    trip = await make_trip(db_session, fleet)
    mocker.patch.object(LedgerStore, "update_trip", side_effect=StoreError("update_trip", "store unavailable"))

    with pytest.raises(StoreError) as exc_info:
        await TripService.complete_trip(store, trip.id, CompletionExpenses(fuel=800))

    assert exc_info.value.step == "update_trip"
    income, expenses = await ledger_rows(db_session)
    assert income == [] and expenses == []
    assert refresh_events == []


@pytest.mark.asyncio
async def test_cancellation_after_trip_update_is_partial(db_session, fleet, mocker):
    trip = await make_trip(db_session, fleet)
    ctx = OperationContext()
    store = LedgerStore(db_session, ctx)
    original_update = LedgerStore.update_trip

    async def update_then_cancel(self, trip_id, patch):
        updated = await original_update(self, trip_id, patch)
        ctx.cancel()
        return updated

    mocker.patch.object(LedgerStore, "update_trip", update_then_cancel)

    with pytest.raises(PartialWorkflowFailure) as exc_info:
        await TripService.complete_trip(store, trip.id, CompletionExpenses(fuel=800))

    statuses = [s.status for s in exc_info.value.result.steps]
    assert statuses == ["committed", "failed", "not_attempted", "skipped", "skipped"]
    income, expenses = await ledger_rows(db_session)
    assert income == [] and expenses == []


@pytest.mark.asyncio
async def test_cancelled_before_start(db_session, fleet):
    trip = await make_trip(db_session, fleet)
    ctx = OperationContext()
    ctx.cancel()

    with pytest.raises(OperationCancelledError):
        await TripService.complete_trip(LedgerStore(db_session, ctx), trip.id, CompletionExpenses())

    assert (await LedgerStore(db_session).get_trip(trip.id)).status == TripStatus.RUNNING


@pytest.mark.asyncio
async def test_store_down_after_trip_update_reports_every_step(db_session, store, fleet,
                                                               fail_commits_after, refresh_events):
    trip = await make_trip(db_session, fleet)
    fail_commits_after(1)

    with pytest.raises(PartialWorkflowFailure) as exc_info:
        await TripService.complete_trip(store, trip.id, CompletionExpenses(fuel=800))

    steps = exc_info.value.result.steps
    assert [(s.name, s.status) for s in steps] == [
        ("update_trip", "committed"),
        ("insert_income", "failed"),
        ("insert_expense:fuel", "not_attempted"),
        ("insert_expense:toll_parking", "skipped"),
        ("insert_expense:miscellaneous", "skipped"),
    ]
    assert "server closed the connection" in steps[1].error

    income, expenses = await ledger_rows(db_session)
    assert income == [] and expenses == []
    assert (await store.get_trip(trip.id)).status == TripStatus.COMPLETED
    assert len(refresh_events) == 1
