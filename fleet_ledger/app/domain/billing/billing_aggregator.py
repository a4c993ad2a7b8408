"""
Client Billing Aggregator.

Derives per-client bills from trip, income and expense snapshots:
- trips joined on client
- payments (income) joined on client
- expenses joined on the client's trips

balance is always total_fare - total_paid. Clients with no trips are not
billed.
"""

import logging
from typing import Any, Dict, List, Optional

from fleet_ledger.app.core.exceptions import ResourceNotFoundError
from fleet_ledger.app.domain.ledger.values import as_amount, enum_value, ledger_today
from fleet_ledger.app.schemas.billing import BillDocument, BilledTrip, BillingSummary, ClientBill
from fleet_ledger.app.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def _billed_trip(trip) -> BilledTrip:
    return BilledTrip(
        id=trip.id,
        trip_number=trip.trip_number or "",
        pickup_location=trip.pickup_location,
        drop_location=trip.drop_location,
        start_date=trip.start_date,
        status=enum_value(trip.status),
        fare_amount=as_amount(trip.fare_amount),
    )


def _matches_client(client, search: str) -> bool:
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in (value or "").lower() for value in (client.name, client.company_name))


def compute_client_bills(clients: List[Any], trips: List[Any], income: List[Any], expenses: List[Any],
                         client_id: Optional[int] = None, search: Optional[str] = None) -> List[ClientBill]:
    """Bills for every client with at least one trip, in client order."""
    trips_by_client: Dict[int, List[Any]] = {}
    for trip in trips:
        if trip.client_id is not None:
            trips_by_client.setdefault(trip.client_id, []).append(trip)

    paid_by_client: Dict[int, float] = {}
    for record in income:
        if record.client_id is not None:
            paid_by_client[record.client_id] = paid_by_client.get(record.client_id, 0.0) + as_amount(record.amount)

    expenses_by_trip: Dict[int, float] = {}
    for record in expenses:
        if record.trip_id is not None:
            expenses_by_trip[record.trip_id] = expenses_by_trip.get(record.trip_id, 0.0) + as_amount(record.amount)

    bills = []
    for client in clients:
        if client_id is not None and client.id != client_id:
            continue
        if search and not _matches_client(client, search):
            continue

        client_trips = trips_by_client.get(client.id, [])
        if not client_trips:
            continue

        total_fare = sum(as_amount(trip.fare_amount) for trip in client_trips)
        total_paid = paid_by_client.get(client.id, 0.0)

        bills.append(ClientBill(
            client_id=client.id,
            client_name=client.name,
            company_name=client.company_name,
            gst_number=client.gst_number,
            address=client.address,
            phone=client.phone,
            trips=[_billed_trip(trip) for trip in client_trips],
            total_fare=total_fare,
            total_paid=total_paid,
            total_expenses=sum(expenses_by_trip.get(trip.id, 0.0) for trip in client_trips),
            balance=total_fare - total_paid,
        ))

    return bills


def compute_billing_summary(bills: List[ClientBill]) -> BillingSummary:
    total_billed = sum(bill.total_fare for bill in bills)
    total_received = sum(bill.total_paid for bill in bills)
    return BillingSummary(
        total_billed=total_billed,
        total_received=total_received,
        total_pending=total_billed - total_received,
    )


def build_bill_document(bill: ClientBill, issued_on=None) -> BillDocument:
    """Formatter handoff for one client's bill."""
    return BillDocument(
        client_id=bill.client_id,
        client_name=bill.client_name,
        company_name=bill.company_name,
        gst_number=bill.gst_number,
        address=bill.address,
        phone=bill.phone,
        trips=bill.trips,
        total_fare=bill.total_fare,
        total_paid=bill.total_paid,
        balance=bill.balance,
        issued_on=issued_on or ledger_today(),
    )


class BillingService:

    @staticmethod
    async def get_client_bills(store: LedgerStore, client_id: Optional[int] = None,
                               search: Optional[str] = None) -> List[ClientBill]:
        """
        Bills for clients with at least one trip.

        Raises:
            ResourceNotFoundError: client_id names a client that does not exist
        """
        if client_id is not None and await store.get_client(client_id) is None:
            raise ResourceNotFoundError("Client", client_id)

        clients = await store.list_clients()
        trips = await store.list_trips()
        income = await store.list_income()
        expenses = await store.list_expenses()
        return compute_client_bills(clients, trips, income, expenses, client_id=client_id, search=search)

    @staticmethod
    async def get_billing_summary(store: LedgerStore) -> BillingSummary:
        """Totals over all bills; never narrowed by a client filter."""
        bills = await BillingService.get_client_bills(store)
        return compute_billing_summary(bills)

    @staticmethod
    async def get_bill_document(store: LedgerStore, client_id: int) -> BillDocument:
        """
        Bill document for one client.

        Raises:
            ResourceNotFoundError: unknown client, or a client with no trips
        """
        bills = await BillingService.get_client_bills(store, client_id=client_id)
        if not bills:
            logger.info("Client %s has no trips to bill", client_id)
            raise ResourceNotFoundError("Bill for client", client_id)

        return build_bill_document(bills[0])
