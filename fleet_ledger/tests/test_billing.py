"""
Client billing tests.
"""

import pytest
from datetime import date
from types import SimpleNamespace

from fleet_ledger.app.core.exceptions import ResourceNotFoundError
from fleet_ledger.app.domain.billing.billing_aggregator import (
    BillingService, compute_billing_summary, compute_client_bills
)
from fleet_ledger.app.models.expense import Expense
from fleet_ledger.app.models.income import Income
from fleet_ledger.app.models.trip import Trip
from fleet_ledger.app.models.trip_enums import TripStatus


def client(id, name, company_name=None):
    return SimpleNamespace(id=id, name=name, company_name=company_name, gst_number=None, address=None, phone=None)


def trip(id, client_id, fare_amount):
    return SimpleNamespace(
        id=id, client_id=client_id, fare_amount=fare_amount, trip_number=f"TRP-{id:05d}",
        pickup_location="Pune", drop_location="Mumbai", start_date=None, status=TripStatus.COMPLETED,
    )


CLIENTS = [client(1, "Acme Traders", "Acme Pvt Ltd"), client(2, "Zenith Foods"), client(3, "Orbit Logistics")]
TRIPS = [trip(1, 1, 1000), trip(2, 1, 1500), trip(3, 3, None), trip(4, None, 700)]
INCOME = [SimpleNamespace(client_id=1, amount=2000), SimpleNamespace(client_id=2, amount=300),
          SimpleNamespace(client_id=None, amount=50)]
EXPENSES = [SimpleNamespace(trip_id=1, amount=400), SimpleNamespace(trip_id=4, amount=90),
            SimpleNamespace(trip_id=None, amount=10)]


def test_client_bill_totals():
    bills = compute_client_bills(CLIENTS, TRIPS, INCOME, EXPENSES)
    acme = bills[0]

    assert acme.client_id == 1
    assert [t.id for t in acme.trips] == [1, 2]
    assert acme.total_fare == 2500
    assert acme.total_paid == 2000
    assert acme.total_expenses == 400
    assert acme.balance == 500


def test_clients_without_trips_are_excluded():
    bills = compute_client_bills(CLIENTS, TRIPS, INCOME, EXPENSES)

    assert [b.client_id for b in bills] == [1, 3]
    assert all(b.balance == b.total_fare - b.total_paid for b in bills)


def test_missing_fare_counts_as_zero():
    orbit = compute_client_bills(CLIENTS, TRIPS, INCOME, EXPENSES)[1]

    assert orbit.total_fare == 0
    assert orbit.balance == 0
    assert orbit.trips[0].status == "completed"


def test_filter_by_client_and_search():
    assert [b.client_id for b in compute_client_bills(CLIENTS, TRIPS, INCOME, EXPENSES, client_id=3)] == [3]
    assert [b.client_id for b in compute_client_bills(CLIENTS, TRIPS, INCOME, EXPENSES, search="pvt")] == [1]
    assert compute_client_bills(CLIENTS, TRIPS, INCOME, EXPENSES, search="zenith") == []


def test_billing_summary():
    summary = compute_billing_summary(compute_client_bills(CLIENTS, TRIPS, INCOME, EXPENSES))

    assert summary.total_billed == 2500
    assert summary.total_received == 2000
    assert summary.total_pending == 500


@pytest.mark.asyncio
async def test_bill_document_from_store(db_session, store, fleet):
    acme = fleet["acme"]
    db_session.add_all([
        Trip(pickup_location="Pune", drop_location="Mumbai", client_id=acme.id, fare_amount=1000,
             trip_number="TRP-00001"),
        Trip(pickup_location="Pune", drop_location="Nashik", client_id=acme.id, fare_amount=1500,
             trip_number="TRP-00002"),
        Income(amount=2000, client_id=acme.id, payment_date=date(2024, 6, 1)),
    ])
    await db_session.commit()

    document = await BillingService.get_bill_document(store, acme.id)

    assert document.client_name == "Acme Traders"
    assert document.gst_number == "27ABCDE1234F1Z5"
    assert [t.trip_number for t in document.trips] == ["TRP-00001", "TRP-00002"]
    assert document.total_fare == 2500
    assert document.balance == 500
    assert document.issued_on is not None


@pytest.mark.asyncio
async def test_bill_document_not_found(store, fleet):
    with pytest.raises(ResourceNotFoundError):
        await BillingService.get_bill_document(store, 999)

    # Known client, but nothing to bill
    with pytest.raises(ResourceNotFoundError):
        await BillingService.get_bill_document(store, fleet["zenith"].id)


@pytest.mark.asyncio
async def test_summary_ignores_client_filter(db_session, store, fleet):
    db_session.add_all([
        Trip(pickup_location="A", drop_location="B", client_id=fleet["acme"].id, fare_amount=1000),
        Trip(pickup_location="C", drop_location="D", client_id=fleet["zenith"].id, fare_amount=400),
        Expense(amount=100),
    ])
    await db_session.commit()

    filtered = await BillingService.get_client_bills(store, client_id=fleet["zenith"].id)
    summary = await BillingService.get_billing_summary(store)

    assert len(filtered) == 1
    assert summary.total_billed == 1400
    assert summary.total_pending == 1400


@pytest.mark.asyncio
async def test_client_filter_rejects_unknown_client(store, fleet):
    with pytest.raises(ResourceNotFoundError):
        await BillingService.get_client_bills(store, client_id=999)

    # Known client without trips is simply not billed
    assert await BillingService.get_client_bills(store, client_id=fleet["zenith"].id) == []
