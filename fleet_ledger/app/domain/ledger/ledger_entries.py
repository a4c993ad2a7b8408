"""
Direct income and expense entry.
"""

import logging

from fleet_ledger.app.core.exceptions import InputValidationError
from fleet_ledger.app.domain.ledger.values import ledger_today
from fleet_ledger.app.models.expense import Expense
from fleet_ledger.app.models.income import Income
from fleet_ledger.app.schemas.ledger import ExpenseCreate, IncomeCreate
from fleet_ledger.app.services.ledger_store import LedgerStore
from fleet_ledger.app.services.refresh import refresh_notifier

logger = logging.getLogger(__name__)


def _validate_amount(amount: float):
    if amount < 0:
        raise InputValidationError("Amount cannot be negative", field="amount")


class LedgerEntryService:

    @staticmethod
    async def create_income(store: LedgerStore, payload: IncomeCreate) -> Income:
        """Record a payment received. Defaults the payment date to today."""
        _validate_amount(payload.amount)

        record = await store.insert_income(Income(
            amount=payload.amount,
            payment_date=payload.payment_date or ledger_today(),
            payment_method=payload.payment_method,
            reference_number=payload.reference_number,
            notes=payload.notes,
            trip_id=payload.trip_id,
            client_id=payload.client_id,
        ))

        await refresh_notifier.emit("income_created", "income", record.id)
        logger.info("Recorded income %s of %.2f", record.id, record.amount)
        return record

    @staticmethod
    async def create_expense(store: LedgerStore, payload: ExpenseCreate) -> Expense:
        """Record an expense. Defaults the expense date to today."""
        _validate_amount(payload.amount)

        record = await store.insert_expense(Expense(
            category=payload.category,
            amount=payload.amount,
            expense_date=payload.expense_date or ledger_today(),
            description=payload.description,
            receipt_url=payload.receipt_url,
            trip_id=payload.trip_id,
            vehicle_id=payload.vehicle_id,
            driver_id=payload.driver_id,
        ))

        await refresh_notifier.emit("expense_created", "expense", record.id)
        logger.info("Recorded %s expense %s of %.2f", payload.category.value, record.id, record.amount)
        return record
