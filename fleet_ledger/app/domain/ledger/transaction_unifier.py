"""
Transaction Unifier.

Presents income and expense records as one ordered, filterable ledger
without losing their type-specific fields, and routes single-field edits
back to the right store call.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from fleet_ledger.app.core.exceptions import InputValidationError, ResourceNotFoundError
from fleet_ledger.app.domain.ledger.values import (
    as_amount, enum_value, format_amount, parse_ledger_date
)
from fleet_ledger.app.models.ledger_enums import ExpenseCategory, TransactionKind
from fleet_ledger.app.schemas.transaction import (
    KindFilter, SortField, SortOrder, Transaction, TransactionFilter, TransactionSort
)
from fleet_ledger.app.services.ledger_store import LedgerStore
from fleet_ledger.app.services.refresh import refresh_notifier

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("date", "amount", "description")

# Transaction field -> column on the underlying record
FIELD_COLUMNS = {
    TransactionKind.INCOME: {"date": "payment_date", "amount": "amount", "description": "notes"},
    TransactionKind.EXPENSE: {"date": "expense_date", "amount": "amount", "description": "description"},
}


def _by_id(records: Iterable[Any]) -> Dict[int, Any]:
    return {record.id: record for record in records}


def _category(value: Any) -> Optional[ExpenseCategory]:
    raw = enum_value(value)
    if not raw:
        return None
    try:
        return ExpenseCategory(raw)
    except ValueError:
        return None


def _name(records: Dict[int, Any], record_id: Optional[int], attr: str) -> Optional[str]:
    record = records.get(record_id) if record_id is not None else None
    return getattr(record, attr, None) if record else None


def income_to_transaction(income, trips: Dict[int, Any], clients: Dict[int, Any]) -> Transaction:
    return Transaction(
        id=income.id,
        kind=TransactionKind.INCOME,
        date=parse_ledger_date(income.payment_date),
        amount=as_amount(income.amount),
        payment_method=income.payment_method,
        trip_id=income.trip_id,
        client_id=income.client_id,
        description=income.notes,
        reference=income.reference_number,
        trip_number=_name(trips, income.trip_id, "trip_number"),
        client_name=_name(clients, income.client_id, "name"),
    )


def expense_to_transaction(expense, trips: Dict[int, Any], vehicles: Dict[int, Any],
                           drivers: Dict[int, Any]) -> Transaction:
    return Transaction(
        id=expense.id,
        kind=TransactionKind.EXPENSE,
        date=parse_ledger_date(expense.expense_date),
        amount=as_amount(expense.amount),
        category=_category(expense.category),
        trip_id=expense.trip_id,
        vehicle_id=expense.vehicle_id,
        driver_id=expense.driver_id,
        description=expense.description,
        trip_number=_name(trips, expense.trip_id, "trip_number"),
        vehicle_number=_name(vehicles, expense.vehicle_id, "vehicle_number"),
        driver_name=_name(drivers, expense.driver_id, "name"),
    )


def unify_transactions(income: List[Any], expenses: List[Any], trips: List[Any],
                       vehicles: List[Any], drivers: List[Any], clients: List[Any]) -> List[Transaction]:
    """
    Merge income and expenses into one list: income first, then expenses,
    each in store order. That order is the tie-breaker for every sort.

    Records with a negative amount break the ledger's sign convention and
    are left out.
    """
    trips_by_id = _by_id(trips)
    vehicles_by_id = _by_id(vehicles)
    drivers_by_id = _by_id(drivers)
    clients_by_id = _by_id(clients)

    merged: List[Transaction] = []
    for record in income:
        if as_amount(record.amount) < 0:
            logger.warning("Skipping income %s with negative amount", record.id)
            continue
        merged.append(income_to_transaction(record, trips_by_id, clients_by_id))

    for record in expenses:
        if as_amount(record.amount) < 0:
            logger.warning("Skipping expense %s with negative amount", record.id)
            continue
        merged.append(expense_to_transaction(record, trips_by_id, vehicles_by_id, drivers_by_id))

    return merged


def search_fields(txn: Transaction) -> List[str]:
    fields = [
        txn.trip_number,
        txn.vehicle_number,
        txn.driver_name,
        txn.client_name,
        txn.category.value if txn.category else txn.payment_method,
        txn.description,
        txn.reference,
        format_amount(txn.amount),
    ]
    return [field for field in fields if field]


def matches_search(txn: Transaction, term: str) -> bool:
    """Case-insensitive substring match against any searchable field."""
    needle = term.strip().lower()
    if not needle:
        return True
    return any(needle in field.lower() for field in search_fields(txn))


def filter_transactions(transactions: List[Transaction], criteria: TransactionFilter) -> List[Transaction]:
    result = []
    for txn in transactions:
        if criteria.kind != KindFilter.ALL and txn.kind.value != criteria.kind.value:
            continue
        if criteria.date_from or criteria.date_to:
            if txn.date is None:
                continue
            if criteria.date_from and txn.date < criteria.date_from:
                continue
            if criteria.date_to and txn.date > criteria.date_to:
                continue
        if criteria.search and not matches_search(txn, criteria.search):
            continue
        result.append(txn)
    return result


def sort_transactions(transactions: List[Transaction], sort: TransactionSort) -> List[Transaction]:
    """
    Stable sort by date or amount.

    Equal keys keep their merged order in both directions; undated records
    always come last.
    """
    reverse = sort.order == SortOrder.DESC

    if sort.sort_by == SortField.AMOUNT:
        return sorted(transactions, key=lambda txn: txn.amount, reverse=reverse)

    dated = [txn for txn in transactions if txn.date is not None]
    undated = [txn for txn in transactions if txn.date is None]
    return sorted(dated, key=lambda txn: txn.date, reverse=reverse) + undated


def select_transactions(transactions: List[Transaction], criteria: TransactionFilter,
                        sort: TransactionSort) -> List[Transaction]:
    return sort_transactions(filter_transactions(transactions, criteria), sort)


def coerce_patch_value(field: str, value: Any) -> Any:
    """
    Turn a raw edit value into the column value.

    Amounts parse leniently (garbage becomes 0) but may not be negative;
    dates must parse; blank descriptions clear the field.
    """
    if field == "amount":
        amount = as_amount(value)
        if amount < 0:
            raise InputValidationError("Amount cannot be negative", field="amount")
        return amount

    if field == "date":
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        parsed = parse_ledger_date(value)
        if parsed is None:
            raise InputValidationError(f"'{value}' is not a valid date", field="date")
        return parsed

    if value is None:
        return None
    text = str(value).strip()
    return text or None


class TransactionService:

    @staticmethod
    async def list_transactions(store: LedgerStore, criteria: TransactionFilter,
                                sort: TransactionSort) -> List[Transaction]:
        """List the unified ledger with the given filter and sort."""
        income = await store.list_income()
        expenses = await store.list_expenses()
        trips = await store.list_trips()
        vehicles = await store.list_vehicles()
        drivers = await store.list_drivers()
        clients = await store.list_clients()

        merged = unify_transactions(income, expenses, trips, vehicles, drivers, clients)
        return select_transactions(merged, criteria, sort)

    @staticmethod
    async def get_ledger_record(store: LedgerStore, kind: TransactionKind, transaction_id: int) -> Any:
        """
        Fetch the income or expense row behind a transaction.

        Raises:
            ResourceNotFoundError: no such record
            InputValidationError: the stored amount is negative, so the
                record is not part of the ledger
        """
        if kind == TransactionKind.INCOME:
            record = await store.get_income(transaction_id)
        else:
            record = await store.get_expense(transaction_id)

        if record is None:
            raise ResourceNotFoundError(kind.value.capitalize(), transaction_id)
        if as_amount(record.amount) < 0:
            raise InputValidationError(
                f"{kind.value.capitalize()} {transaction_id} has a negative amount; correct the amount first",
                field="amount",
            )
        return record

    @staticmethod
    async def get_transaction(store: LedgerStore, kind: TransactionKind, transaction_id: int) -> Transaction:
        """Fetch one record as a Transaction with its display names resolved."""
        record = await TransactionService.get_ledger_record(store, kind, transaction_id)

        if kind == TransactionKind.INCOME:
            trips = await store.list_trips()
            clients = await store.list_clients()
            return income_to_transaction(record, _by_id(trips), _by_id(clients))

        trips = await store.list_trips()
        vehicles = await store.list_vehicles()
        drivers = await store.list_drivers()
        return expense_to_transaction(record, _by_id(trips), _by_id(vehicles), _by_id(drivers))

    @staticmethod
    async def patch_field(store: LedgerStore, transaction_id: int, kind: str, field: str,
                          value: Any) -> Transaction:
        """
        Edit one field of an income or expense record.

        Flow:
        1. Validate kind and coerce the value (no store call on bad input)
        2. Route to update_income / update_expense
        3. Emit a refresh event
        4. Return the updated Transaction

        Unknown fields are a no-op: the current record is returned unchanged.
        A record stored with a negative amount only accepts an amount edit;
        any other edit is rejected before writing.
        """
        try:
            kind = TransactionKind(kind)
        except ValueError:
            raise InputValidationError(f"Unknown transaction kind '{kind}'", field="kind")

        if field not in EDITABLE_FIELDS:
            logger.info("Ignoring patch of non-editable field '%s' on %s %s", field, kind.value, transaction_id)
            return await TransactionService.get_transaction(store, kind, transaction_id)

        column_value = coerce_patch_value(field, value)
        patch = {FIELD_COLUMNS[kind][field]: column_value}

        if field != "amount":
            await TransactionService.get_ledger_record(store, kind, transaction_id)

        if kind == TransactionKind.INCOME:
            await store.update_income(transaction_id, patch)
        else:
            await store.update_expense(transaction_id, patch)

        await refresh_notifier.emit("transaction_patched", kind.value, transaction_id)
        logger.info("Patched %s %s field '%s'", kind.value, transaction_id, field)

        return await TransactionService.get_transaction(store, kind, transaction_id)
