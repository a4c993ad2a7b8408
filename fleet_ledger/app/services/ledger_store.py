"""
Ledger Store Client.

Async read/write access to vehicles, drivers, clients, trips, income and
expenses. Reads return full collections; filtering and aggregation happen in
the domain layer. Every call is bounded by the store timeout and the request
deadline, and persistence failures surface as StoreError naming the step.
"""

import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_ledger.app.core.exceptions import ResourceNotFoundError, StoreError
from fleet_ledger.app.core.reliability import OperationContext, rollback_after_failure, run_store_call
from fleet_ledger.app.models.vehicle import Vehicle
from fleet_ledger.app.models.driver import Driver
from fleet_ledger.app.models.client import Client
from fleet_ledger.app.models.trip import Trip
from fleet_ledger.app.models.income import Income
from fleet_ledger.app.models.expense import Expense

logger = logging.getLogger(__name__)


class LedgerStore:
    """Thin async store client bound to one session and one operation context."""

    def __init__(self, db: AsyncSession, ctx: Optional[OperationContext] = None):
        self.db = db
        self.ctx = ctx or OperationContext()

    # --- Reads ---

    async def _list(self, step: str, model: Type) -> List[Any]:
        self.ctx.check(step)
        result = await run_store_call(step, self.db.execute(select(model).order_by(model.id)), self.ctx)
        return list(result.scalars().all())

    async def _get(self, step: str, model: Type, record_id: int) -> Optional[Any]:
        self.ctx.check(step)
        return await run_store_call(step, self.db.get(model, record_id), self.ctx)

    async def list_vehicles(self) -> List[Vehicle]:
        return await self._list("list_vehicles", Vehicle)

    async def list_drivers(self) -> List[Driver]:
        return await self._list("list_drivers", Driver)

    async def list_clients(self) -> List[Client]:
        return await self._list("list_clients", Client)

    async def list_trips(self) -> List[Trip]:
        return await self._list("list_trips", Trip)

    async def list_income(self) -> List[Income]:
        return await self._list("list_income", Income)

    async def list_expenses(self) -> List[Expense]:
        return await self._list("list_expenses", Expense)

    async def get_trip(self, trip_id: int) -> Optional[Trip]:
        return await self._get("get_trip", Trip, trip_id)

    async def get_client(self, client_id: int) -> Optional[Client]:
        return await self._get("get_client", Client, client_id)

    async def get_income(self, income_id: int) -> Optional[Income]:
        return await self._get("get_income", Income, income_id)

    async def get_expense(self, expense_id: int) -> Optional[Expense]:
        return await self._get("get_expense", Expense, expense_id)

    # --- Writes ---

    async def _commit_write(self, step: str, record: Any) -> Any:
        """Commit the pending change for `record`, rolling back the session on failure."""
        async def _persist():
            await self.db.commit()
            await self.db.refresh(record)
            return record

        try:
            return await run_store_call(step, _persist(), self.ctx)
        except StoreError:
            logger.error("Store write '%s' failed, rolling back", step)
            await rollback_after_failure(self.db, step)
            raise

    async def _insert(self, step: str, record: Any) -> Any:
        self.ctx.check(step)
        self.db.add(record)
        return await self._commit_write(step, record)

    async def _update(self, step: str, model: Type, record_id: int, patch: Dict[str, Any]) -> Any:
        self.ctx.check(step)
        record = await run_store_call(step, self.db.get(model, record_id), self.ctx)
        if record is None:
            raise ResourceNotFoundError(model.__name__, record_id)

        for field, value in patch.items():
            setattr(record, field, value)

        return await self._commit_write(step, record)

    async def insert_trip(self, record: Trip) -> Trip:
        return await self._insert("insert_trip", record)

    async def update_trip(self, trip_id: int, patch: Dict[str, Any]) -> Trip:
        return await self._update("update_trip", Trip, trip_id, patch)

    async def insert_income(self, record: Income) -> Income:
        return await self._insert("insert_income", record)

    async def insert_expense(self, record: Expense) -> Expense:
        return await self._insert("insert_expense", record)

    async def update_income(self, income_id: int, patch: Dict[str, Any]) -> Income:
        return await self._update("update_income", Income, income_id, patch)

    async def update_expense(self, expense_id: int, patch: Dict[str, Any]) -> Expense:
        return await self._update("update_expense", Expense, expense_id, patch)
